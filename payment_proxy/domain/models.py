"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, FrozenSet, List, Literal, Optional, Tuple

Provider = Literal["stripe", "paypal", "blocked"]
ChargeStatus = Literal["success", "blocked"]
Interval = Literal["daily", "weekly", "monthly", "yearly"]
RecurringStatus = Literal["success", "failed"]


@dataclass(frozen=True)
class ChargeRequest:
    """One-off charge submitted to the proxy"""

    amount: int  # minor units
    currency: str
    source: str
    email: str


@dataclass(frozen=True)
class FraudRules:
    """Thresholds and lists driving the risk score"""

    suspicious_domains: Tuple[str, ...]
    high_risk_amount_threshold: int
    blocking_threshold: float
    stripe_threshold: float
    high_risk_currencies: FrozenSet[str] = frozenset({"RUB", "CNY", "KRW"})
    base_currency: str = "USD"
    test_source_marker: str = "test"

    def with_overrides(self, **changes) -> "FraudRules":
        """Copy of the rules with selected fields replaced"""
        return replace(self, **changes)


@dataclass(frozen=True)
class RiskAssessment:
    """Output of a single scoring pass"""

    score: float
    provider: Provider
    risk_factors: List[str]


@dataclass(frozen=True)
class Transaction:
    """Completed charge attempt, owned by the transaction ledger"""

    id: str
    amount: int
    currency: str
    source: str
    email: str
    provider: Provider
    status: ChargeStatus
    risk_score: float
    explanation: str
    created_at: datetime
    risk_factors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ChargeResult:
    """What the caller gets back from processing a charge"""

    transaction_id: str
    provider: Provider
    status: ChargeStatus
    risk_score: float  # rounded to 2 decimals
    explanation: str


@dataclass(frozen=True)
class TransactionStats:
    total: int
    successful: int
    blocked: int
    total_amount: int
    average_risk_score: float
    provider_breakdown: Dict[str, int]


@dataclass(frozen=True)
class CampaignAnalysis:
    """Tags and one-line summary for a donation campaign"""

    tags: Tuple[str, ...]
    summary: str


@dataclass(frozen=True)
class SubscriptionRequest:
    donor_id: str
    amount: int
    currency: str
    interval: Interval
    campaign_description: str


@dataclass
class Subscription:
    """Recurring donation; mutated in place by cancel and successful charges"""

    id: str
    donor_id: str
    amount: int
    currency: str
    interval: Interval
    campaign_description: str
    tags: List[str]
    summary: str
    created_at: datetime
    next_charge_at: datetime
    last_charged_at: Optional[datetime] = None
    is_active: bool = True


@dataclass(frozen=True)
class SubscriptionTransaction:
    """Recurring charge attempt"""

    id: str
    subscription_id: str
    donor_id: str
    amount: int
    currency: str
    status: RecurringStatus
    created_at: datetime
    type: str = "recurring"


@dataclass(frozen=True)
class SubscriptionStats:
    total_active: int
    total_cancelled: int
    monthly_recurring_revenue: float
    campaigns_by_tag: Dict[str, int]
    interval_breakdown: Dict[str, int]


@dataclass(frozen=True)
class SweepResult:
    """Outcome of one recurrence sweep"""

    due: int
    succeeded: int
    failed: int
    skipped: int
