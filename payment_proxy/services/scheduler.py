"""Recurrence scheduler - periodic sweep that charges due subscriptions"""

import asyncio
import logging
import time
import uuid
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from payment_proxy.domain.models import Subscription, SubscriptionTransaction, SweepResult
from payment_proxy.infrastructure.clients.processor import ProcessorSimulator
from payment_proxy.infrastructure.observability.logging import log_sweep
from payment_proxy.infrastructure.observability.metrics import (
    recurring_charge_counter,
    sweep_counter,
    sweep_duration_histogram,
)
from payment_proxy.infrastructure.storage.ledger import SubscriptionTransactionLedger
from payment_proxy.infrastructure.storage.registry import SubscriptionRegistry
from payment_proxy.utils.date_utils import utcnow

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class RecurrenceScheduler:
    """
    Charges due subscriptions on a fixed period or on demand.

    A sweep moves idle -> running -> idle. Triggers that arrive while a sweep is
    running are no-ops, so a manual trigger racing the timer cannot charge a
    subscription twice.

    Failed charges leave `next_charge_at` untouched: the subscription stays due
    and is retried on the next sweep. There is no backoff and no automatic
    cancellation.
    """

    def __init__(
        self,
        registry: SubscriptionRegistry,
        ledger: SubscriptionTransactionLedger,
        processor: ProcessorSimulator,
        interval_seconds: float = 3600.0,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.registry = registry
        self.ledger = ledger
        self.processor = processor
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._state = SchedulerState.IDLE
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        """True while the periodic timer task is alive"""
        return self._task is not None and not self._task.done()

    async def run_sweep(self) -> Optional[SweepResult]:
        """Charge every due subscription once; None if a sweep is already in progress"""
        if self._state is SchedulerState.RUNNING:
            logger.info("Recurrence sweep already running, trigger ignored")
            sweep_counter.labels(outcome="skipped").inc()
            return None

        self._state = SchedulerState.RUNNING
        start_time = time.time()
        try:
            due = self.registry.due_subscriptions(self._clock())
            succeeded = failed = skipped = 0

            for subscription in due:
                outcome = await self._charge(subscription)
                if outcome is None:
                    skipped += 1
                elif outcome:
                    succeeded += 1
                else:
                    failed += 1

            result = SweepResult(due=len(due), succeeded=succeeded, failed=failed, skipped=skipped)
        finally:
            self._state = SchedulerState.IDLE

        duration = time.time() - start_time
        sweep_counter.labels(outcome="completed").inc()
        sweep_duration_histogram.observe(duration)
        log_sweep(result.due, result.succeeded, result.failed, result.skipped, duration * 1000)
        return result

    async def _charge(self, subscription: Subscription) -> Optional[bool]:
        """
        Attempt one recurring charge inside the donor's critical section.

        Returns True/False for success/failure, None when the subscription was
        cancelled, replaced, or already advanced before the lock was acquired.
        """
        async with self.registry.lock(subscription.donor_id):
            now = self._clock()
            current = self.registry.by_donor(subscription.donor_id)
            if current is not subscription or not current.is_active or current.next_charge_at > now:
                return None

            success = await self.processor.charge_recurring(current)
            charged_at = self._clock()

            self.ledger.append(
                SubscriptionTransaction(
                    id=f"txn_{uuid.uuid4().hex[:8]}",
                    subscription_id=current.id,
                    donor_id=current.donor_id,
                    amount=current.amount,
                    currency=current.currency,
                    status="success" if success else "failed",
                    created_at=charged_at,
                )
            )

            if success:
                self.registry.advance(current.donor_id, charged_at)
                recurring_charge_counter.labels(status="success").inc()
                logger.info(
                    "Recurring charge succeeded",
                    extra={"donor_id": current.donor_id, "amount": current.amount, "summary": current.summary},
                )
            else:
                recurring_charge_counter.labels(status="failed").inc()
                logger.warning(
                    "Recurring charge failed",
                    extra={"donor_id": current.donor_id, "amount": current.amount, "summary": current.summary},
                )
            return success

    def start(self) -> None:
        """Start the periodic timer; no-op if already started"""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run_periodically())
        logger.info("Recurrence scheduler started", extra={"interval_seconds": self.interval_seconds})

    async def stop(self) -> None:
        """Cancel the periodic timer and wait for it to finish"""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Recurrence scheduler stopped")

    async def _run_periodically(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.run_sweep()
            except Exception:
                # Keep the timer alive; the next tick retries
                logger.exception("Recurrence sweep failed")
