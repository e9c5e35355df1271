"""Core facade: owns the ledgers, registry, and scheduler for the process lifetime"""

import logging
import random
from datetime import datetime
from typing import Callable, List, Optional

from payment_proxy.config import Settings
from payment_proxy.domain.models import (
    ChargeRequest,
    ChargeResult,
    FraudRules,
    Subscription,
    SubscriptionRequest,
    SubscriptionStats,
    SubscriptionTransaction,
    SweepResult,
    Transaction,
    TransactionStats,
)
from payment_proxy.infrastructure.clients.llm import ExplanationGenerator, build_explanation_generator
from payment_proxy.infrastructure.clients.processor import ProcessorSimulator
from payment_proxy.infrastructure.storage.ledger import SubscriptionTransactionLedger, TransactionLedger
from payment_proxy.infrastructure.storage.registry import SubscriptionRegistry
from payment_proxy.services.explanations import ExplanationService
from payment_proxy.services.payments import PaymentService
from payment_proxy.services.scheduler import RecurrenceScheduler
from payment_proxy.services.subscriptions import SubscriptionService
from payment_proxy.utils.date_utils import utcnow

logger = logging.getLogger(__name__)


class PaymentGateway:
    """Entry point for every core operation; constructed at startup, shut down on exit"""

    def __init__(
        self,
        rules: FraudRules,
        explanations: ExplanationService,
        processor: ProcessorSimulator,
        sweep_interval_seconds: float = 3600.0,
        scheduler_enabled: bool = True,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.transactions = TransactionLedger()
        self.subscription_transactions = SubscriptionTransactionLedger()
        self.registry = SubscriptionRegistry()
        self.explanations = explanations
        self.scheduler_enabled = scheduler_enabled

        self.payments = PaymentService(rules, self.transactions, explanations, processor, rng=rng, clock=clock)
        self.subscriptions = SubscriptionService(self.registry, explanations, clock=clock)
        self.scheduler = RecurrenceScheduler(
            self.registry,
            self.subscription_transactions,
            processor,
            interval_seconds=sweep_interval_seconds,
            clock=clock,
        )

    # Charges

    async def process_charge(self, request: ChargeRequest) -> ChargeResult:
        return await self.payments.process_charge(request)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self.transactions.by_id(transaction_id)

    def list_transactions(self, **filters) -> List[Transaction]:
        return self.transactions.filter(**filters)

    def transaction_stats(self) -> TransactionStats:
        return self.transactions.stats()

    def clear_transactions(self) -> int:
        """Drop every one-off charge record, returning how many were removed"""
        removed = len(self.transactions)
        self.transactions.clear()
        logger.info("Transaction ledger cleared", extra={"removed": removed})
        return removed

    # Subscriptions

    async def create_subscription(
        self, request: SubscriptionRequest, reject_if_active: bool = False
    ) -> Optional[Subscription]:
        return await self.subscriptions.create_subscription(request, reject_if_active=reject_if_active)

    def get_subscription_by_donor(self, donor_id: str) -> Optional[Subscription]:
        return self.subscriptions.get_subscription_by_donor(donor_id)

    async def cancel_subscription(self, donor_id: str) -> bool:
        return await self.subscriptions.cancel_subscription(donor_id)

    def active_subscriptions(self) -> List[Subscription]:
        return self.registry.active_subscriptions()

    def subscription_stats(self) -> SubscriptionStats:
        return self.registry.stats()

    def list_subscription_transactions(self, donor_id: str | None = None) -> List[SubscriptionTransaction]:
        if donor_id is None:
            return self.subscription_transactions.all()
        return self.subscription_transactions.by_donor(donor_id)

    async def trigger_recurrence_sweep(self) -> Optional[SweepResult]:
        return await self.scheduler.run_sweep()

    # Lifecycle

    def start(self) -> None:
        if self.scheduler_enabled:
            self.scheduler.start()

    async def shutdown(self) -> None:
        await self.scheduler.stop()
        self.explanations.clear_expired_cache()
        logger.info("Payment gateway shut down")


def build_gateway(
    config: Settings,
    generator: ExplanationGenerator | None = None,
    rng: random.Random | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> PaymentGateway:
    """Wire the gateway from settings"""
    explanations = ExplanationService(
        generator or build_explanation_generator(config),
        cache_ttl_seconds=config.llm_cache_ttl_seconds,
        timeout=config.llm_timeout_seconds,
    )
    processor = ProcessorSimulator(
        latency_ms=config.provider_latency_ms if config.simulate_provider_latency else {},
        success_rate=config.recurring_charge_success_rate,
    )
    return PaymentGateway(
        rules=config.fraud_rules(),
        explanations=explanations,
        processor=processor,
        sweep_interval_seconds=config.recurring_sweep_interval_seconds,
        scheduler_enabled=config.scheduler_enabled,
        rng=rng,
        clock=clock,
    )
