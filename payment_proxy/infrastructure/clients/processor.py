"""Simulated downstream payment processors"""

import asyncio
import random
from typing import Dict

from payment_proxy.config import settings
from payment_proxy.domain.models import Subscription


class ProcessorSimulator:
    """Stands in for Stripe/PayPal: fixed per-provider latency and a recurring charge success rate"""

    def __init__(
        self,
        latency_ms: Dict[str, int] | None = None,
        success_rate: float | None = None,
        rng: random.Random | None = None,
    ):
        self.latency_ms = settings.provider_latency_ms if latency_ms is None else latency_ms
        self.success_rate = settings.recurring_charge_success_rate if success_rate is None else success_rate
        self._rng = rng or random.Random()

    async def submit(self, provider: str) -> None:
        """Simulate provider round-trip time for a one-off charge"""
        delay_ms = self.latency_ms.get(provider, 0)
        if delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000)

    async def charge_recurring(self, subscription: Subscription) -> bool:
        """Attempt a recurring charge; True on success"""
        await asyncio.sleep(self.latency_ms.get("recurring", 0) / 1000)
        return self._rng.random() < self.success_rate
