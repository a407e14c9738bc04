"""Exception types raised across the auditor"""

from typing import Optional


class AuditorError(Exception):
    """Base class for auditor failures"""


class AuthenticationError(AuditorError):
    """No usable Azure credential or session"""


class SubscriptionBindingError(AuditorError):
    """A subscription could not be selected as the working context"""

    def __init__(self, subscription_id: str, reason: str):
        super().__init__(f"Cannot bind subscription {subscription_id}: {reason}")
        self.subscription_id = subscription_id
        self.reason = reason


class EnumerationError(AuditorError):
    """Listing the eligible resources of a subscription failed"""

    def __init__(self, subscription_id: str, reason: str):
        super().__init__(f"Cannot list resources in subscription {subscription_id}: {reason}")
        self.subscription_id = subscription_id
        self.reason = reason


class PricingLookupError(AuditorError):
    """The Defender pricing endpoint rejected or failed a request"""

    def __init__(self, scope_id: str, reason: str, status_code: Optional[int] = None):
        message = f"HTTP {status_code}: {reason}" if status_code else reason
        super().__init__(message)
        self.scope_id = scope_id
        self.reason = reason
        self.status_code = status_code


class ExportError(AuditorError):
    """Writing a report file failed"""
