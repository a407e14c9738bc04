"""Console presentation of scan results"""

from typing import Iterable, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..core.aggregator import (
    PARTITION_KEYS,
    PlanCounts,
    aggregate,
    find_overrides,
    label_histogram,
    overall_counts,
)
from ..core.interfaces import ScanObserver
from ..core.models import ScanProfile, ScanReport, ScanResultRecord


def sort_records(records: Iterable[ScanResultRecord]) -> List[ScanResultRecord]:
    """Order used by both the console table and the CSV export"""
    return sorted(records, key=lambda r: (r.subscription_id.lower(), r.resource_name.lower()))


def _colored(plan: str, profile: ScanProfile) -> str:
    color = profile.color_for(plan)
    return f"[{color}]{escape(plan)}[/{color}]"


class ConsoleScanObserver(ScanObserver):
    """Prints scan progress, one line per subscription and per resource"""

    def __init__(self, console: Console, profile: ScanProfile, limit: Optional[int] = None):
        self.console = console
        self.profile = profile
        self.limit = limit

    def subscription_started(self, subscription_id: str, index: int, total: int) -> None:
        self.console.print(f"\n🔍 [{index}/{total}] Subscription [cyan]{escape(subscription_id)}[/cyan]")

    def subscription_skipped(self, subscription_id: str, reason: str) -> None:
        self.console.print(f"   ⚠️  Skipped {subscription_id}: {escape(reason)}", style="yellow")

    def subscription_default(self, subscription_id: str, plan: Optional[str], error: Optional[str] = None) -> None:
        if plan is None:
            self.console.print(f"   ⚠️  Default plan unavailable: {escape(str(error))}", style="yellow")
        else:
            self.console.print(f"   📋 Subscription default plan: {_colored(plan, self.profile)}")

    def resources_found(self, subscription_id: str, found: int, selected: int) -> None:
        message = f"   📦 {found} eligible resource(s)"
        if selected < found:
            message += f", scanning first {selected}"
        self.console.print(message)

    def resource_scanned(self, record: ScanResultRecord, processed: int) -> None:
        position = f"{processed}/{self.limit}" if self.limit else str(processed)
        line = f"   [{position}] {escape(record.resource_name)} ({record.scope.value}): {_colored(record.plan, self.profile)}"
        if record.error_message:
            line += f" [red]{escape(record.error_message)}[/red]"
        self.console.print(line, highlight=False)

    def budget_exhausted(self, limit: int) -> None:
        self.console.print(f"\n⏹️  Resource limit of {limit} reached, remaining resources not scanned", style="yellow")


def display_results_table(console: Console, records: List[ScanResultRecord], profile: ScanProfile) -> None:
    """One row per scanned resource"""

    if not records:
        console.print("No resources were scanned.", style="yellow")
        return

    table = Table(title="🛡️  Defender for Servers plan per resource")
    table.add_column("Subscription", style="magenta")
    table.add_column("Resource", style="cyan")
    table.add_column("Plan")
    table.add_column("Scope", style="blue")
    table.add_column("Error", style="red")

    for record in sort_records(records):
        table.add_row(
            record.subscription_id,
            escape(record.resource_name),
            _colored(record.plan, profile),
            record.scope.value,
            escape(record.error_message or ""),
        )

    console.print(table)


def _counts_row(counts: PlanCounts, show_standard: bool) -> List[str]:
    row = [str(counts.p1), str(counts.p2), str(counts.free)]
    if show_standard:
        row.append(str(counts.standard))
        row.append(str(counts.other - counts.standard))
    else:
        row.append(str(counts.other))
    row.append(str(counts.total))
    return row


def display_summary(console: Console, records: List[ScanResultRecord], profile: ScanProfile) -> None:
    """Overall plan counts followed by one line per partition"""

    overall = overall_counts(records)
    lines = [
        f"P2: {overall.p2}",
        f"P1: {overall.p1}",
        f"Free: {overall.free}",
    ]
    if profile.show_standard:
        lines.append(f"Standard: {overall.standard}")
        lines.append(f"Other: {overall.other - overall.standard}")
    else:
        lines.append(f"Other: {overall.other}")
    lines.append(f"Total: {overall.total}")
    console.print(Panel("\n".join(lines), title="📊 Overall plan summary", expand=False))

    if not records:
        return

    partition = profile.partition
    table = Table(title=f"Plans per {partition}")
    table.add_column(partition.capitalize(), style="cyan")
    table.add_column("P1", style="yellow", justify="right")
    table.add_column("P2", style="green", justify="right")
    table.add_column("Free", style="red", justify="right")
    if profile.show_standard:
        table.add_column("Standard", style="cyan", justify="right")
    table.add_column("Other", justify="right")
    table.add_column("Total", style="bold", justify="right")

    groups = aggregate(records, PARTITION_KEYS[partition])
    for key in sorted(groups):
        table.add_row(key, *_counts_row(groups[key], profile.show_standard))

    console.print(table)


def display_label_breakdown(console: Console, records: List[ScanResultRecord], profile: ScanProfile) -> None:
    """Exact count of every plan label per partition"""

    if not records:
        return

    partition = profile.partition
    histogram = label_histogram(records, PARTITION_KEYS[partition])
    labels = sorted({label for counts in histogram.values() for label in counts})

    table = Table(title=f"Plan labels per {partition}")
    table.add_column(partition.capitalize(), style="cyan")
    for label in labels:
        table.add_column(_colored(label, profile), justify="right")

    for key in sorted(histogram):
        table.add_row(key, *[str(histogram[key][label]) for label in labels])

    console.print(table)


def display_overrides(console: Console, report: ScanReport, profile: ScanProfile) -> None:
    """Resources whose plan differs from their subscription default"""

    overrides = find_overrides(report.records, report.subscription_defaults)
    if not overrides:
        if report.subscription_defaults:
            console.print("✅ No resource-level overrides of subscription defaults found.", style="green")
        return

    table = Table(title=f"🔀 Resource-level overrides ({len(overrides)})")
    table.add_column("Subscription", style="magenta")
    table.add_column("Resource", style="cyan")
    table.add_column("Subscription default")
    table.add_column("Resource plan")

    for record in sort_records(overrides):
        default = report.subscription_defaults[record.subscription_id]
        table.add_row(
            record.subscription_id,
            escape(record.resource_name),
            _colored(default, profile),
            _colored(record.plan, profile),
        )

    console.print(table)


def display_skipped(console: Console, report: ScanReport) -> None:
    if not report.skipped_subscriptions:
        return

    console.print("\n⚠️  Subscriptions skipped:", style="yellow")
    for subscription_id, reason in report.skipped_subscriptions.items():
        console.print(f"  • {subscription_id}: {escape(reason)}", style="yellow")


def display_report(console: Console, report: ScanReport, profile: ScanProfile, verbose: bool = False) -> None:
    """Full console report of a finished scan"""

    console.print()
    display_results_table(console, report.records, profile)
    display_summary(console, report.records, profile)
    if verbose:
        display_label_breakdown(console, report.records, profile)
    display_overrides(console, report, profile)
    display_skipped(console, report)
    console.print(
        f"\n⏱️  Scanned {len(report.records)} resource(s) in {report.duration_seconds:.2f} seconds"
        f" ({report.error_count} lookup error(s))"
    )
