"""
Tracking Orchestrator - Refresh orders from a tracking provider

Responsibilities:
- refresh_one: fetch one order's timeline and apply it in a single step
- refresh_many: concurrent fan-out, one order's failure never stops the rest
- refresh_pending: bounded pass over undelivered orders (background refresh)
- detect status changes and hand them to the notifier
- publish widget snapshots and the order catalog

No retries happen here. A failed fetch is reported once; retry policy is
the caller's business.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from .errors import OrderRefreshError
from .models import Order, OrderStatus, utcnow
from .notifications import StatusChangeNotifier
from .providers.base import BaseTrackingProvider
from .snapshots import SnapshotSink, catalog_for_orders, snapshot_for_order

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 5


def status_changed(old: OrderStatus, new: OrderStatus) -> bool:
    return old != new


@dataclass(frozen=True)
class RefreshOutcome:
    """What a single refresh did to an order."""
    order_id: uuid.UUID
    old_status: OrderStatus
    new_status: OrderStatus
    skipped: bool = False  # order had no tracking code

    @property
    def changed(self) -> bool:
        return status_changed(self.old_status, self.new_status)


@dataclass
class BatchRefreshReport:
    """Outcomes and errors of a batch refresh, one entry per order."""
    outcomes: List[RefreshOutcome] = field(default_factory=list)
    errors: List[OrderRefreshError] = field(default_factory=list)

    @property
    def updated(self) -> List[RefreshOutcome]:
        return [o for o in self.outcomes if not o.skipped]

    @property
    def changed(self) -> List[RefreshOutcome]:
        return [o for o in self.outcomes if o.changed]

    @property
    def failed_order_ids(self) -> List[uuid.UUID]:
        return [e.order_id for e in self.errors]


class TrackingOrchestrator:
    """
    Drives order refreshes against one tracking provider.

    Args:
        provider: Tracking provider used for every fetch
        snapshot_sink: Optional widget sink written after each successful refresh
        notifier: Optional notifier called when a refresh changed the status
        max_concurrency: Upper bound on simultaneous provider calls in a batch
        clock: Callable returning the current aware datetime

    Example:
        orchestrator = TrackingOrchestrator(
            TrackingProviderFactory.create_provider(settings),
            snapshot_sink=JsonFileSnapshotStore(settings.snapshot_dir),
            notifier=LoggingNotifier(),
            max_concurrency=settings.max_concurrency,
        )
        report = await orchestrator.refresh_many(orders)
        for error in report.errors:
            print(error.order_id, error.cause)
    """

    def __init__(
        self,
        provider: BaseTrackingProvider,
        snapshot_sink: Optional[SnapshotSink] = None,
        notifier: Optional[StatusChangeNotifier] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.provider = provider
        self.snapshot_sink = snapshot_sink
        self.notifier = notifier
        self.max_concurrency = max_concurrency
        self.clock = clock or utcnow

    async def refresh_one(self, order: Order) -> RefreshOutcome:
        """
        Refresh a single order.

        Orders without a tracking code are skipped without calling the provider.

        Returns:
            RefreshOutcome with the statuses before and after

        Raises:
            OrderRefreshError: the provider failed; the order is left untouched
        """
        old_status = order.status
        if not order.has_tracking_code:
            logger.debug(f"Order {order.id} has no tracking code, skipping")
            return RefreshOutcome(order.id, old_status, old_status, skipped=True)

        code = order.tracking_code.strip()
        try:
            result = await self.provider.fetch_tracking(code, carrier_hint=order.carrier)
        except Exception as e:
            logger.warning(f"Failed to refresh order {order.id} ({code}): {e}")
            raise OrderRefreshError(order.id, e) from e

        now = self.clock()
        order.apply_result(result, now)
        outcome = RefreshOutcome(order.id, old_status, order.status)
        logger.info(f"Order updated: {order.title} - {order.status.display_name}")

        self._publish_snapshot(order, now)
        if outcome.changed:
            await self._notify(order, old_status)
        return outcome

    async def refresh_many(self, orders: List[Order]) -> BatchRefreshReport:
        """
        Refresh every order that has a tracking code, concurrently.

        At most ``max_concurrency`` provider calls run at once. A failing
        order adds exactly one OrderRefreshError to the report and does not
        affect the others.
        """
        report = await self._refresh_batch([o for o in orders if o.has_tracking_code])
        self._publish_catalog(orders)
        return report

    async def refresh_pending(self, orders: List[Order], limit: int = DEFAULT_MAX_CONCURRENCY) -> BatchRefreshReport:
        """Refresh up to ``limit`` undelivered orders; meant for periodic background runs."""
        pending = [o for o in orders if o.has_tracking_code and o.status != OrderStatus.DELIVERED]
        batch = pending[:limit]
        logger.info(f"Background refresh: {len(batch)} of {len(pending)} pending orders")
        report = await self._refresh_batch(batch)
        # The catalog lists every order, not just the refreshed slice
        self._publish_catalog(orders)
        return report

    async def _refresh_batch(self, targets: List[Order]) -> BatchRefreshReport:
        report = BatchRefreshReport()
        if not targets:
            return report

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def refresh_guarded(order: Order):
            async with semaphore:
                try:
                    return await self.refresh_one(order)
                except OrderRefreshError as e:
                    return e

        results = await asyncio.gather(*[refresh_guarded(o) for o in targets])

        for result in results:
            if isinstance(result, OrderRefreshError):
                report.errors.append(result)
            else:
                report.outcomes.append(result)

        logger.info(
            f"Batch refresh done: {len(report.outcomes)} updated, "
            f"{len(report.changed)} changed, {len(report.errors)} failed"
        )
        return report

    def _publish_snapshot(self, order: Order, now: datetime) -> None:
        if self.snapshot_sink is None:
            return
        try:
            self.snapshot_sink.save_snapshot(snapshot_for_order(order, now))
        except OSError as e:
            logger.error(f"Failed to save snapshot for order {order.id}: {e}")

    def _publish_catalog(self, orders: List[Order]) -> None:
        if self.snapshot_sink is None:
            return
        try:
            self.snapshot_sink.save_catalog(catalog_for_orders(orders))
        except OSError as e:
            logger.error(f"Failed to save order catalog: {e}")

    async def _notify(self, order: Order, old_status: OrderStatus) -> None:
        if self.notifier is None:
            return
        try:
            await self.notifier.notify(order, old_status)
        except Exception as e:
            logger.error(f"Failed to notify status change for order {order.id}: {e}", exc_info=True)
