"""Charge processing: score, route, explain, record"""

import random
import time
import uuid
from datetime import datetime
from typing import Callable

from payment_proxy.domain.models import ChargeRequest, ChargeResult, FraudRules, Transaction
from payment_proxy.domain.scoring import assess_charge
from payment_proxy.infrastructure.clients.processor import ProcessorSimulator
from payment_proxy.infrastructure.observability.logging import log_charge
from payment_proxy.infrastructure.observability.metrics import record_charge
from payment_proxy.infrastructure.storage.ledger import TransactionLedger
from payment_proxy.services.explanations import ExplanationService
from payment_proxy.utils.date_utils import utcnow


def generate_transaction_id() -> str:
    return f"txn_{uuid.uuid4().hex[:8]}"


class PaymentService:
    """Routes one-off charges through fraud scoring to a provider"""

    def __init__(
        self,
        rules: FraudRules,
        ledger: TransactionLedger,
        explanations: ExplanationService,
        processor: ProcessorSimulator,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.rules = rules
        self.ledger = ledger
        self.explanations = explanations
        self.processor = processor
        self._rng = rng
        self._clock = clock

    async def process_charge(self, request: ChargeRequest) -> ChargeResult:
        """
        Process a charge request through fraud detection and provider routing.

        Flow:
        1. Score the request and pick a provider
        2. Generate an explanation (cached, falls back on generator failure)
        3. Append the transaction to the ledger
        4. Simulate provider processing latency
        """
        start_time = time.time()

        assessment = assess_charge(request, self.rules, self._rng)
        status = "blocked" if assessment.provider == "blocked" else "success"

        explanation = await self.explanations.explain_routing(
            request, assessment.score, assessment.provider, assessment.risk_factors
        )

        transaction = Transaction(
            id=generate_transaction_id(),
            amount=request.amount,
            currency=request.currency,
            source=request.source,
            email=request.email,
            provider=assessment.provider,
            status=status,
            risk_score=assessment.score,
            explanation=explanation,
            created_at=self._clock(),
            risk_factors=list(assessment.risk_factors),
        )
        self.ledger.append(transaction)

        await self.processor.submit(assessment.provider)

        duration_ms = (time.time() - start_time) * 1000
        record_charge(assessment.provider, assessment.score)
        log_charge(transaction.id, assessment.provider, status, assessment.score, assessment.risk_factors, duration_ms)

        return ChargeResult(
            transaction_id=transaction.id,
            provider=assessment.provider,
            status=status,
            risk_score=round(assessment.score, 2),
            explanation=explanation,
        )
