"""Bounded multi-subscription scan of Defender server plans"""

import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .interfaces import IPricingClient, IResourceEnumerator, ISubscriptionBinder, ScanObserver
from .models import (
    PlanLabel,
    ResourceDescriptor,
    ResourceScope,
    ScanProfile,
    ScanReport,
    ScanResultRecord,
)
from .normalizer import classify_scope, normalize_plan
from .profiles import COMPUTE_PROFILE
from ..utils.logger import setup_logger


class ResourceBudget:
    """Global cap on resources processed across every subscription of a scan.

    ``remaining`` is None when no limit is configured. It only ever
    decreases, one step per processed resource.
    """

    def __init__(self, limit: Optional[int] = None):
        self.limit = limit if limit is not None and limit > 0 else None
        self.remaining = self.limit

    @property
    def bounded(self) -> bool:
        return self.limit is not None

    @property
    def exhausted(self) -> bool:
        return self.remaining is not None and self.remaining <= 0

    def take(self, resources: Sequence[ResourceDescriptor]) -> List[ResourceDescriptor]:
        """First ``remaining`` resources in the order given"""
        if self.remaining is None:
            return list(resources)
        return list(resources)[:max(self.remaining, 0)]

    def consume(self) -> None:
        if self.remaining is None:
            return
        if self.remaining <= 0:
            raise RuntimeError("Resource budget already exhausted")
        self.remaining -= 1


@dataclass(frozen=True)
class LookupOutcome:
    """Result of one pricing lookup: a plan label or a failure description"""
    plan: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, plan: str) -> "LookupOutcome":
        return cls(plan=plan)

    @classmethod
    def failed(cls, error: str) -> "LookupOutcome":
        return cls(error=error)

    def to_record(
        self,
        subscription_id: str,
        resource: ResourceDescriptor,
        scope: ResourceScope
    ) -> ScanResultRecord:
        return ScanResultRecord(
            subscription_id=subscription_id,
            resource_name=resource.name,
            resource_id=resource.resource_id,
            plan=PlanLabel.ERROR if self.error is not None else self.plan,
            scope=scope,
            error_message=self.error,
        )


def describe_error(error: BaseException) -> str:
    """Human readable, never empty, description of an exception"""
    message = str(error).strip()
    return message or error.__class__.__name__


class ScanCoordinator:
    """Walks subscriptions and their resources under a single global budget"""

    def __init__(
        self,
        binder: ISubscriptionBinder,
        enumerator: IResourceEnumerator,
        pricing_client: IPricingClient,
        profile: Optional[ScanProfile] = None,
        observer: Optional[ScanObserver] = None
    ):
        self.binder = binder
        self.enumerator = enumerator
        self.pricing_client = pricing_client
        self.profile = profile or COMPUTE_PROFILE
        self.observer = observer or ScanObserver()
        self.logger = setup_logger(self.__class__.__name__)

    def scan(
        self,
        subscription_ids: Iterable[str],
        resource_limit: Optional[int] = None
    ) -> List[ScanResultRecord]:
        """Scan and return the records in processing order"""
        return self.run(subscription_ids, resource_limit).records

    def run(
        self,
        subscription_ids: Iterable[str],
        resource_limit: Optional[int] = None
    ) -> ScanReport:
        """Scan and return the records together with scan metadata"""

        start_time = time.time()
        budget = ResourceBudget(resource_limit)
        report = ScanReport(
            scan_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            limit=budget.limit,
        )
        targets = list(subscription_ids)

        self.logger.info(
            f"Starting scan {report.scan_id}: {len(targets)} subscription(s), "
            f"limit {budget.limit if budget.bounded else 'none'}, profile {self.profile.name}"
        )

        for subscription_id, resource in self._work_items(targets, budget, report):
            record = self._scan_resource(subscription_id, resource)
            report.records.append(record)
            budget.consume()
            self.observer.resource_scanned(record, len(report.records))

        if budget.exhausted:
            self.logger.info(f"Resource limit of {budget.limit} reached, scan stopped")
            self.observer.budget_exhausted(budget.limit)

        report.duration_seconds = time.time() - start_time
        self.logger.info(
            f"Scan {report.scan_id} completed: {len(report.records)} resource(s), "
            f"{report.error_count} lookup error(s), {len(report.skipped_subscriptions)} skipped subscription(s)"
        )
        return report

    def _work_items(
        self,
        subscription_ids: List[str],
        budget: ResourceBudget,
        report: ScanReport
    ) -> Iterator[Tuple[str, ResourceDescriptor]]:
        """Flatten subscriptions and their resources into one stream.

        The budget is checked before every pair; the stream ends as soon as it
        is exhausted, whichever subscription is being visited.
        """
        total = len(subscription_ids)
        for index, subscription_id in enumerate(subscription_ids, start=1):
            if budget.exhausted:
                return

            resources = self._prepare_subscription(subscription_id, index, total, report)
            if not resources:
                continue

            selected = budget.take(resources)
            self.logger.debug(
                f"Subscription {subscription_id}: {len(resources)} resource(s), scanning {len(selected)}"
            )
            self.observer.resources_found(subscription_id, len(resources), len(selected))
            for resource in selected:
                if budget.exhausted:
                    return
                yield subscription_id, resource

    def _prepare_subscription(
        self,
        subscription_id: str,
        index: int,
        total: int,
        report: ScanReport
    ) -> List[ResourceDescriptor]:
        """Bind, report the default plan and enumerate one subscription.

        Returns an empty list when the subscription has to be skipped.
        """
        self.observer.subscription_started(subscription_id, index, total)

        try:
            display_name = self.binder.bind_subscription(subscription_id)
            self.logger.debug(f"Bound subscription {subscription_id} ({display_name})")
        except Exception as e:
            self._skip(subscription_id, f"context binding failed: {describe_error(e)}", report)
            return []

        self._report_subscription_default(subscription_id, report)

        try:
            resources = list(self.enumerator.list_resources(subscription_id))
        except Exception as e:
            self._skip(subscription_id, f"resource enumeration failed: {describe_error(e)}", report)
            return []

        if not resources:
            self._skip(subscription_id, "no eligible resources found", report)
            return []

        return resources

    def _report_subscription_default(self, subscription_id: str, report: ScanReport) -> None:
        try:
            pricing = self.pricing_client.get_subscription_pricing(subscription_id)
        except Exception as e:
            message = describe_error(e)
            self.logger.warning(f"Could not read default plan of subscription {subscription_id}: {message}")
            self.observer.subscription_default(subscription_id, None, message)
            return

        plan = normalize_plan(pricing.sub_plan, pricing.pricing_tier)
        report.subscription_defaults[subscription_id] = plan
        self.logger.debug(f"Subscription {subscription_id} default plan: {plan}")
        self.observer.subscription_default(subscription_id, plan)

    def _skip(self, subscription_id: str, reason: str, report: ScanReport) -> None:
        self.logger.warning(f"Skipping subscription {subscription_id}: {reason}")
        report.skipped_subscriptions[subscription_id] = reason
        self.observer.subscription_skipped(subscription_id, reason)

    def _lookup(self, resource: ResourceDescriptor) -> LookupOutcome:
        try:
            pricing = self.pricing_client.get_resource_pricing(resource.resource_id)
        except Exception as e:
            message = describe_error(e)
            self.logger.warning(f"Pricing lookup failed for {resource.name} ({resource.resource_id}): {message}")
            return LookupOutcome.failed(message)
        return LookupOutcome.ok(normalize_plan(pricing.sub_plan, pricing.pricing_tier))

    def _scan_resource(self, subscription_id: str, resource: ResourceDescriptor) -> ScanResultRecord:
        scope = classify_scope(resource.resource_type)
        outcome = self._lookup(resource)
        return outcome.to_record(subscription_id, resource, scope)
