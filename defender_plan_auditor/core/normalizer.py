"""Plan normalization and resource scope classification"""

from typing import Optional

from .models import AzureResourceType, PlanLabel, ResourceScope


_SCOPE_SUFFIXES = (
    # Scale sets first: their type shares the Microsoft.Compute prefix with VMs
    ("virtualmachinescalesets", ResourceScope.VMSS),
    (AzureResourceType.VIRTUAL_MACHINE.value.lower(), ResourceScope.VM),
    (AzureResourceType.ARC_MACHINE.value.lower(), ResourceScope.ARC),
)


def _clean(value: Optional[str]) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_plan(sub_plan: Optional[str], pricing_tier: Optional[str]) -> str:
    """Map a raw pricing record to a single plan label.

    A sub-plan always wins over the tier and is returned as-is (trimmed).
    Tiers ``Free`` and ``Standard`` are matched case-insensitively; any other
    tier is passed through. With neither present the plan is ``Unknown``.
    """
    plan = _clean(sub_plan)
    if plan:
        return plan

    tier = _clean(pricing_tier)
    if not tier:
        return PlanLabel.UNKNOWN
    if tier.lower() == PlanLabel.FREE.lower():
        return PlanLabel.FREE
    if tier.lower() == PlanLabel.STANDARD.lower():
        return PlanLabel.STANDARD
    return tier


def classify_scope(resource_type: Optional[str]) -> ResourceScope:
    """Classify an ARM resource type string as VM, VMSS, Arc or Unknown"""
    value = _clean(resource_type).lower()
    if not value:
        return ResourceScope.UNKNOWN

    for suffix, scope in _SCOPE_SUFFIXES:
        if value.endswith(suffix):
            return scope
    return ResourceScope.UNKNOWN
