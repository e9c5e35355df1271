"""In-memory registry of donor subscriptions"""

import asyncio
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from payment_proxy.domain.models import CampaignAnalysis, Subscription, SubscriptionRequest, SubscriptionStats
from payment_proxy.domain.recurrence import add_interval, to_monthly_amount


def generate_subscription_id() -> str:
    return f"sub_{uuid.uuid4().hex[:8]}"


class SubscriptionRegistry:
    """
    Owns subscriptions keyed by donor.

    One subscription object per donor: `create` overwrites any prior record, so
    callers check `by_donor(...).is_active` inside the donor lock first.
    `lock(donor_id)` returns the donor's critical section for read -> await ->
    write sequences.
    """

    def __init__(self):
        self._subscriptions: Dict[str, Subscription] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def lock(self, donor_id: str) -> asyncio.Lock:
        """
        The donor's critical section, created on first use.

        Records are never deleted, so a lock lives exactly as long as the
        donor's record. Cancelling an unknown donor never allocates one.
        """
        lock = self._locks.get(donor_id)
        if lock is None:
            lock = self._locks[donor_id] = asyncio.Lock()
        return lock

    def create(self, request: SubscriptionRequest, analysis: CampaignAnalysis, now: datetime) -> Subscription:
        """Register an active subscription whose first charge is one interval from now"""
        subscription = Subscription(
            id=generate_subscription_id(),
            donor_id=request.donor_id,
            amount=request.amount,
            currency=request.currency,
            interval=request.interval,
            campaign_description=request.campaign_description,
            tags=list(analysis.tags),
            summary=analysis.summary,
            created_at=now,
            next_charge_at=add_interval(now, request.interval),
        )
        self._subscriptions[request.donor_id] = subscription
        return subscription

    def cancel(self, donor_id: str) -> bool:
        """Deactivate a donor's subscription; False if absent or already cancelled"""
        subscription = self._subscriptions.get(donor_id)
        if subscription is None or not subscription.is_active:
            return False
        subscription.is_active = False
        return True

    def by_donor(self, donor_id: str) -> Optional[Subscription]:
        return self._subscriptions.get(donor_id)

    def active_subscriptions(self) -> List[Subscription]:
        """Active subscriptions, newest first"""
        return sorted(
            (s for s in self._subscriptions.values() if s.is_active),
            key=lambda s: s.created_at,
            reverse=True,
        )

    def due_subscriptions(self, now: datetime) -> List[Subscription]:
        return [s for s in self.active_subscriptions() if s.next_charge_at <= now]

    def advance(self, donor_id: str, charged_at: datetime) -> Subscription:
        """Record a successful charge and schedule the next one"""
        subscription = self._subscriptions[donor_id]
        subscription.last_charged_at = charged_at
        subscription.next_charge_at = add_interval(charged_at, subscription.interval)
        return subscription

    def stats(self) -> SubscriptionStats:
        """
        Aggregate figures over active subscriptions.

        MRR normalizes every interval to a 30-day month (see to_monthly_amount).
        """
        active = [s for s in self._subscriptions.values() if s.is_active]

        campaigns_by_tag: Dict[str, int] = {}
        interval_breakdown: Dict[str, int] = {}
        for s in active:
            for tag in s.tags:
                campaigns_by_tag[tag] = campaigns_by_tag.get(tag, 0) + 1
            interval_breakdown[s.interval] = interval_breakdown.get(s.interval, 0) + 1

        return SubscriptionStats(
            total_active=len(active),
            total_cancelled=len(self._subscriptions) - len(active),
            monthly_recurring_revenue=sum(to_monthly_amount(s.amount, s.interval) for s in active),
            campaigns_by_tag=campaigns_by_tag,
            interval_breakdown=interval_breakdown,
        )

    def __len__(self) -> int:
        return len(self._subscriptions)
