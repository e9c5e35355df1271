"""Append-only in-memory ledgers for charge attempts"""

from datetime import datetime
from typing import Dict, List, Optional

from payment_proxy.domain.models import SubscriptionTransaction, Transaction, TransactionStats


class TransactionLedger:
    """Ledger for one-off charges routed through the proxy"""

    def __init__(self):
        self._transactions: List[Transaction] = []
        self._by_id: Dict[str, Transaction] = {}

    def append(self, transaction: Transaction) -> None:
        """Record a completed charge attempt"""
        self._transactions.append(transaction)
        self._by_id[transaction.id] = transaction

    def by_id(self, transaction_id: str) -> Optional[Transaction]:
        return self._by_id.get(transaction_id)

    def all(self) -> List[Transaction]:
        """All transactions, newest first"""
        return sorted(self._transactions, key=lambda t: t.created_at, reverse=True)

    def filter(
        self,
        provider: str | None = None,
        status: str | None = None,
        min_amount: int | None = None,
        max_amount: int | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> List[Transaction]:
        """
        Transactions matching every provided predicate, newest first.

        Amount and date bounds are inclusive; omitted predicates match everything.
        """
        results = [
            t
            for t in self._transactions
            if (provider is None or t.provider == provider)
            and (status is None or t.status == status)
            and (min_amount is None or t.amount >= min_amount)
            and (max_amount is None or t.amount <= max_amount)
            and (start_date is None or t.created_at >= start_date)
            and (end_date is None or t.created_at <= end_date)
        ]
        return sorted(results, key=lambda t: t.created_at, reverse=True)

    def stats(self) -> TransactionStats:
        total = len(self._transactions)
        average_risk_score = sum(t.risk_score for t in self._transactions) / total if total else 0.0

        provider_breakdown: Dict[str, int] = {}
        for t in self._transactions:
            provider_breakdown[t.provider] = provider_breakdown.get(t.provider, 0) + 1

        return TransactionStats(
            total=total,
            successful=sum(1 for t in self._transactions if t.status == "success"),
            blocked=sum(1 for t in self._transactions if t.status == "blocked"),
            total_amount=sum(t.amount for t in self._transactions),
            average_risk_score=round(average_risk_score, 2),
            provider_breakdown=provider_breakdown,
        )

    def clear(self) -> None:
        self._transactions.clear()
        self._by_id.clear()

    def __len__(self) -> int:
        return len(self._transactions)


class SubscriptionTransactionLedger:
    """Ledger for recurring charge attempts"""

    def __init__(self):
        self._transactions: List[SubscriptionTransaction] = []

    def append(self, transaction: SubscriptionTransaction) -> None:
        self._transactions.append(transaction)

    def all(self) -> List[SubscriptionTransaction]:
        return sorted(self._transactions, key=lambda t: t.created_at, reverse=True)

    def by_donor(self, donor_id: str) -> List[SubscriptionTransaction]:
        """Recurring charges for a donor, newest first"""
        return sorted(
            (t for t in self._transactions if t.donor_id == donor_id),
            key=lambda t: t.created_at,
            reverse=True,
        )

    def __len__(self) -> int:
        return len(self._transactions)
