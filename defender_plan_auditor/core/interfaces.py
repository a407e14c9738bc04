"""Collaborator interfaces used by the scan coordinator"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .models import PricingRecord, ResourceDescriptor, ScanResultRecord


class ISubscriptionBinder(ABC):
    """Selects a subscription as the working context"""

    @abstractmethod
    def bind_subscription(self, subscription_id: str) -> str:
        """Bind to the subscription and return its display name.

        Raises SubscriptionBindingError when the subscription is unreachable.
        """
        pass


class IResourceEnumerator(ABC):
    """Lists the eligible resources of a subscription"""

    @abstractmethod
    def list_resources(self, subscription_id: str) -> List[ResourceDescriptor]:
        """Return resources in listing order"""
        pass


class IPricingClient(ABC):
    """Reads Defender pricing state"""

    @abstractmethod
    def get_resource_pricing(self, resource_id: str) -> PricingRecord:
        """Return the resource-level pricing record or raise"""
        pass

    @abstractmethod
    def get_subscription_pricing(self, subscription_id: str) -> PricingRecord:
        """Return the subscription-level default pricing record or raise"""
        pass


class ScanObserver:
    """Receives progress notifications from a running scan.

    Every hook is a no-op so observers override only what they display.
    """

    def subscription_started(self, subscription_id: str, index: int, total: int) -> None:
        pass

    def subscription_skipped(self, subscription_id: str, reason: str) -> None:
        pass

    def subscription_default(self, subscription_id: str, plan: Optional[str], error: Optional[str] = None) -> None:
        pass

    def resources_found(self, subscription_id: str, found: int, selected: int) -> None:
        pass

    def resource_scanned(self, record: ScanResultRecord, processed: int) -> None:
        pass

    def budget_exhausted(self, limit: int) -> None:
        pass
