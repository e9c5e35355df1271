"""Subscription lifecycle: creation with campaign analysis, cancellation"""

import logging
from datetime import datetime
from typing import Callable, Optional

from payment_proxy.domain.models import Subscription, SubscriptionRequest
from payment_proxy.infrastructure.storage.registry import SubscriptionRegistry
from payment_proxy.services.explanations import ExplanationService
from payment_proxy.utils.date_utils import utcnow

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Mutates the registry under per-donor locks so awaits cannot interleave writes"""

    def __init__(
        self,
        registry: SubscriptionRegistry,
        explanations: ExplanationService,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.registry = registry
        self.explanations = explanations
        self._clock = clock

    async def create_subscription(
        self, request: SubscriptionRequest, reject_if_active: bool = False
    ) -> Optional[Subscription]:
        """
        Analyze the campaign and register the subscription.

        Overwrites any prior record for the donor. With `reject_if_active`, an
        active record already held by the donor wins and None is returned; the
        check runs inside the donor lock so concurrent creates cannot both pass.
        """
        async with self.registry.lock(request.donor_id):
            existing = self.registry.by_donor(request.donor_id)
            if reject_if_active and existing is not None and existing.is_active:
                logger.info(
                    "Subscription rejected, donor already active",
                    extra={"donor_id": request.donor_id, "subscription_id": existing.id},
                )
                return None

            analysis = await self.explanations.analyze_campaign(request.campaign_description)
            subscription = self.registry.create(request, analysis, self._clock())

        logger.info(
            "Subscription created",
            extra={
                "donor_id": subscription.donor_id,
                "subscription_id": subscription.id,
                "interval": subscription.interval,
                "tags": subscription.tags,
                "summary": subscription.summary,
            },
        )
        return subscription

    async def cancel_subscription(self, donor_id: str) -> bool:
        """Waits for any in-flight charge on the donor before cancelling"""
        if self.registry.by_donor(donor_id) is None:
            # Unknown donors get no lock allocated
            return False

        async with self.registry.lock(donor_id):
            cancelled = self.registry.cancel(donor_id)

        if cancelled:
            logger.info("Subscription cancelled", extra={"donor_id": donor_id})
        return cancelled

    def get_subscription_by_donor(self, donor_id: str) -> Optional[Subscription]:
        return self.registry.by_donor(donor_id)
