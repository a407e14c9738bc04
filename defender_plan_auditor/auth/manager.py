"""Authentication manager for Azure services"""

import os
import time
from typing import Dict, List, Optional

try:
    from azure.identity import (
        AzureCliCredential,
        DefaultAzureCredential,
        EnvironmentCredential
    )
    from azure.core.exceptions import AzureError
    from azure.mgmt.subscription import SubscriptionClient
except ImportError as e:
    raise ImportError(f"Required Azure SDK packages not installed: {e}")

from ..core.exceptions import AuthenticationError, SubscriptionBindingError
from ..core.interfaces import ISubscriptionBinder
from ..utils.logger import setup_logger

MANAGEMENT_SCOPE = "https://management.azure.com/.default"
TOKEN_REFRESH_MARGIN = 300


class AuthenticationManager(ISubscriptionBinder):
    """Owns the Azure credential and the current subscription context"""

    def __init__(self, credential=None):
        self.logger = setup_logger(self.__class__.__name__)
        self.credential = credential
        self.current_subscription: Optional[str] = None
        self._subscription_cache: Dict[str, str] = {}
        self._subscription_client = None
        self._access_token = None

    def get_credential(self):
        """Get the current credential, initializing if needed"""
        if self.credential:
            return self.credential

        candidates = []
        if all(os.getenv(var) for var in ['AZURE_TENANT_ID', 'AZURE_CLIENT_ID', 'AZURE_CLIENT_SECRET']):
            candidates.append(("environment variables", EnvironmentCredential))
        candidates.append(("Azure CLI", AzureCliCredential))
        candidates.append(("default credential chain", DefaultAzureCredential))

        errors = []
        for label, factory in candidates:
            try:
                credential = factory()
                access_token = credential.get_token(MANAGEMENT_SCOPE)
            except Exception as e:
                self.logger.debug(f"{label} credential failed: {e}")
                errors.append(f"{label}: {e}")
                continue
            self.credential = credential
            self._access_token = access_token
            self.logger.info(f"Authenticated using {label}")
            return self.credential

        raise AuthenticationError(
            "No Azure session available. Run 'az login' or set service principal "
            "environment variables. " + "; ".join(errors)
        )

    def get_access_token(self) -> str:
        """Bearer token for the Azure Resource Manager endpoint.

        The token is reused until it is within TOKEN_REFRESH_MARGIN seconds
        of expiring.
        """
        credential = self.get_credential()
        if self._access_token is not None and self._access_token.expires_on - time.time() > TOKEN_REFRESH_MARGIN:
            return self._access_token.token

        try:
            self._access_token = credential.get_token(MANAGEMENT_SCOPE)
            self.logger.debug("Acquired new Azure access token")
            return self._access_token.token
        except AzureError as e:
            self.logger.error(f"Failed to get Azure access token: {e}")
            raise AuthenticationError(f"Failed to get Azure access token: {e}") from e

    def _subscriptions(self) -> SubscriptionClient:
        if self._subscription_client is None:
            self._subscription_client = SubscriptionClient(self.get_credential())
        return self._subscription_client

    def bind_subscription(self, subscription_id: str) -> str:
        """Select ``subscription_id`` as the working context"""
        try:
            subscription = self._subscriptions().subscriptions.get(subscription_id)
        except AzureError as e:
            raise SubscriptionBindingError(subscription_id, str(e)) from e

        state = getattr(subscription.state, "value", subscription.state)
        if state and str(state) not in ("Enabled", "PastDue", "Warned"):
            raise SubscriptionBindingError(subscription_id, f"subscription state is {state}")

        display_name = subscription.display_name or subscription_id
        self._subscription_cache[subscription_id] = display_name
        self.current_subscription = subscription_id
        self.logger.debug(f"Working subscription set to {display_name} ({subscription_id})")
        return display_name

    def get_accessible_subscriptions(self) -> List[str]:
        """Get list of enabled subscription IDs"""
        subscription_ids = []
        for sub in self._subscriptions().subscriptions.list():
            state = getattr(sub.state, "value", sub.state)
            if str(state) == 'Enabled':
                subscription_ids.append(sub.subscription_id)
                self._subscription_cache[sub.subscription_id] = sub.display_name
                self.logger.debug(f"Found subscription: {sub.display_name} ({sub.subscription_id})")

        self.logger.info(f"Found {len(subscription_ids)} enabled subscriptions")
        return subscription_ids

    def get_subscription_name(self, subscription_id: str) -> str:
        """Get subscription display name"""
        return self._subscription_cache.get(subscription_id, subscription_id[:8] + "...")
