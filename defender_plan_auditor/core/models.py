"""Core data models for the Defender plan auditor"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ResourceScope(Enum):
    """Resource-type classification of a scanned item"""
    VM = "VM"
    VMSS = "VMSS"
    ARC = "Arc"
    UNKNOWN = "Unknown"


class AzureResourceType(Enum):
    """Compute-family resource types covered by the Defender for Servers plan"""
    VIRTUAL_MACHINE = "Microsoft.Compute/virtualMachines"
    VIRTUAL_MACHINE_SCALE_SET = "Microsoft.Compute/virtualMachineScaleSets"
    ARC_MACHINE = "Microsoft.HybridCompute/machines"


class PlanLabel:
    """Canonical plan labels.

    Any other string seen in a record is a raw pricing tier passed through
    unchanged by the normalizer.
    """
    P1 = "P1"
    P2 = "P2"
    FREE = "Free"
    STANDARD = "Standard"
    UNKNOWN = "Unknown"
    ERROR = "Error"


@dataclass(frozen=True)
class ResourceDescriptor:
    """One unit of work produced by a resource enumerator"""
    name: str
    resource_id: str
    resource_type: str


@dataclass(frozen=True)
class PricingRecord:
    """The ``properties`` of a Defender pricing response"""
    sub_plan: Optional[str] = None
    pricing_tier: Optional[str] = None

    @classmethod
    def from_response(cls, payload: Dict[str, Any]) -> "PricingRecord":
        properties = (payload or {}).get("properties") or {}
        return cls(
            sub_plan=properties.get("subPlan"),
            pricing_tier=properties.get("pricingTier"),
        )


@dataclass(frozen=True)
class ScanResultRecord:
    """Plan state of a single scanned resource"""
    subscription_id: str
    resource_name: str
    resource_id: str
    plan: str
    scope: ResourceScope
    error_message: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error_message is not None


@dataclass
class ScanConfiguration:
    """Configuration for a plan audit run"""
    subscription_ids: List[str] = field(default_factory=list)
    limit: Optional[int] = None
    profile: str = "compute"
    export_csv: bool = False
    csv_path: str = "defender_server_plans.csv"
    api_version: str = "2024-01-01"


@dataclass
class ScanReport:
    """Everything a scan produced"""
    scan_id: str
    timestamp: datetime
    limit: Optional[int] = None
    records: List[ScanResultRecord] = field(default_factory=list)
    subscription_defaults: Dict[str, str] = field(default_factory=dict)
    skipped_subscriptions: Dict[str, str] = field(default_factory=dict)
    duration_seconds: float = 0.0

    @property
    def error_count(self) -> int:
        return sum(1 for record in self.records if record.is_error)


@dataclass(frozen=True)
class ScanProfile:
    """Resource coverage and reporting policy of one audit variant"""
    name: str
    resource_types: Tuple[AzureResourceType, ...]
    partition: str = "subscription"
    show_standard: bool = False
    description: str = ""
    plan_colors: Dict[str, str] = field(default_factory=dict, compare=False)

    def color_for(self, plan: str) -> str:
        return self.plan_colors.get(plan, "white")
