"""Client for the Defender for Cloud pricing endpoint"""

from typing import Any, Callable, Dict, Optional

import requests

from ..core.exceptions import PricingLookupError
from ..core.interfaces import IPricingClient
from ..core.models import PricingRecord
from ..utils.logger import setup_logger

ARM_ENDPOINT = "https://management.azure.com"
DEFAULT_API_VERSION = "2024-01-01"


class DefenderPricingClient(IPricingClient):
    """Reads the Defender for Servers pricing at subscription and resource scope.

    Requests go out once, with no retry adapter mounted and the transport's
    default timeout.
    """

    def __init__(
        self,
        token_provider: Callable[[], str],
        api_version: str = DEFAULT_API_VERSION,
        session: Optional[requests.Session] = None,
        endpoint: str = ARM_ENDPOINT
    ):
        self.token_provider = token_provider
        self.api_version = api_version
        self.session = session or requests.Session()
        self.endpoint = endpoint.rstrip("/")
        self.logger = setup_logger(self.__class__.__name__)

    def get_resource_pricing(self, resource_id: str) -> PricingRecord:
        path = f"/{resource_id.strip('/')}/providers/Microsoft.Security/pricings/virtualMachines"
        return PricingRecord.from_response(self._get(resource_id, path))

    def get_subscription_pricing(self, subscription_id: str) -> PricingRecord:
        path = f"/subscriptions/{subscription_id}/providers/Microsoft.Security/pricings/VirtualMachines"
        return PricingRecord.from_response(self._get(subscription_id, path))

    def _get(self, scope_id: str, path: str) -> Dict[str, Any]:
        url = f"{self.endpoint}{path}"
        headers = {
            "Authorization": f"Bearer {self.token_provider()}",
            "Content-Type": "application/json",
        }

        self.logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, headers=headers, params={"api-version": self.api_version})
        except requests.exceptions.RequestException as e:
            raise PricingLookupError(scope_id, f"Request failed: {e}") from e

        if not response.ok:
            raise PricingLookupError(scope_id, _error_message(response), response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise PricingLookupError(scope_id, f"Invalid JSON in pricing response: {e}") from e


def _error_message(response: requests.Response) -> str:
    """Pull the ARM error message out of a failed response"""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error") or {}
        if isinstance(error, dict) and error.get("message"):
            code = error.get("code")
            return f"{code}: {error['message']}" if code else error["message"]

    text = (response.text or "").strip()
    return text[:200] if text else (response.reason or "request failed")
