"""Post-scan statistics over scan result records"""

from collections import Counter, OrderedDict
from dataclasses import asdict, dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from .models import PlanLabel, ScanResultRecord


PartitionKey = Callable[[ScanResultRecord], str]


@dataclass
class PlanCounts:
    """Plan counts for one group of records.

    ``other`` is whatever is left once P1, P2 and Free are taken out of the
    total, so Standard, Unknown, Error and raw tiers all land there.
    ``standard`` is kept for reports that show it as its own column.
    """
    p1: int = 0
    p2: int = 0
    free: int = 0
    standard: int = 0
    other: int = 0
    total: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def by_subscription(record: ScanResultRecord) -> str:
    return record.subscription_id


def by_scope(record: ScanResultRecord) -> str:
    return record.scope.value


PARTITION_KEYS: Dict[str, PartitionKey] = {
    "subscription": by_subscription,
    "scope": by_scope,
}


def _count(records: List[ScanResultRecord]) -> PlanCounts:
    plans = Counter(record.plan for record in records)
    counts = PlanCounts(
        p1=plans[PlanLabel.P1],
        p2=plans[PlanLabel.P2],
        free=plans[PlanLabel.FREE],
        standard=plans[PlanLabel.STANDARD],
        total=len(records),
    )
    counts.other = counts.total - (counts.p1 + counts.p2 + counts.free)
    return counts


def overall_counts(records: Iterable[ScanResultRecord]) -> PlanCounts:
    """Counts across every record"""
    return _count(list(records))


def aggregate(
    records: Iterable[ScanResultRecord],
    partition_key: PartitionKey
) -> Dict[str, PlanCounts]:
    """Group records by ``partition_key`` and count plans per group.

    Groups keep the order in which their first record appears.
    """
    groups: Dict[str, List[ScanResultRecord]] = OrderedDict()
    for record in records:
        groups.setdefault(partition_key(record), []).append(record)

    return OrderedDict((key, _count(members)) for key, members in groups.items())


def label_histogram(
    records: Iterable[ScanResultRecord],
    partition_key: Optional[PartitionKey] = None
) -> Dict[str, Counter]:
    """Exact count of every plan label, optionally per partition.

    Without a partition key the single group is named ``"all"``.
    """
    histogram: Dict[str, Counter] = OrderedDict()
    for record in records:
        key = partition_key(record) if partition_key else "all"
        histogram.setdefault(key, Counter())[record.plan] += 1
    return histogram


def find_overrides(
    records: Iterable[ScanResultRecord],
    subscription_defaults: Mapping[str, str]
) -> List[ScanResultRecord]:
    """Records whose plan differs from their subscription's default plan.

    Failed lookups and subscriptions without a known default are left out.
    """
    overrides = []
    for record in records:
        if record.is_error:
            continue
        default = subscription_defaults.get(record.subscription_id)
        if default is None:
            continue
        if record.plan != default:
            overrides.append(record)
    return overrides
