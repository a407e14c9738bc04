"""Audit variants: which resource types are scanned and how they are reported"""

from typing import Dict

from .models import AzureResourceType, PlanLabel, ScanProfile


_BASE_COLORS = {
    PlanLabel.P2: "green",
    PlanLabel.P1: "yellow",
    PlanLabel.FREE: "red",
    PlanLabel.UNKNOWN: "bright_black",
    PlanLabel.ERROR: "magenta",
}

VM_PROFILE = ScanProfile(
    name="vm",
    resource_types=(AzureResourceType.VIRTUAL_MACHINE,),
    partition="subscription",
    show_standard=False,
    description="Virtual machines only, summarised per subscription",
    plan_colors={**_BASE_COLORS, PlanLabel.STANDARD: "yellow"},
)

COMPUTE_PROFILE = ScanProfile(
    name="compute",
    resource_types=(
        AzureResourceType.VIRTUAL_MACHINE,
        AzureResourceType.VIRTUAL_MACHINE_SCALE_SET,
        AzureResourceType.ARC_MACHINE,
    ),
    partition="scope",
    show_standard=True,
    description="VMs, scale sets and Arc machines, summarised per resource scope",
    plan_colors={**_BASE_COLORS, PlanLabel.STANDARD: "cyan"},
)

PROFILES: Dict[str, ScanProfile] = {
    VM_PROFILE.name: VM_PROFILE,
    COMPUTE_PROFILE.name: COMPUTE_PROFILE,
}


def get_profile(name: str) -> ScanProfile:
    """Look up a profile by name (case-insensitive)"""
    try:
        return PROFILES[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown profile '{name}'. Choose one of: {', '.join(sorted(PROFILES))}"
        ) from None
