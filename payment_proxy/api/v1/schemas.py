"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChargeRequestSchema(BaseModel):
    """Request body for POST /v1/charge"""

    amount: int = Field(..., gt=0, description="Amount in minor units (cents)")
    currency: str = Field(..., pattern=r"^[A-Za-z]{3}$", description="ISO 4217 currency code")
    source: str = Field(..., min_length=1, description="Payment source token")
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", description="Payer email")


class ChargeResponse(BaseModel):
    """Response for POST /v1/charge"""

    model_config = ConfigDict(from_attributes=True)

    transaction_id: str
    provider: Literal["stripe", "paypal", "blocked"]
    status: Literal["success", "blocked"]
    risk_score: float
    explanation: str


class TransactionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    amount: int
    currency: str
    source: str
    email: str
    provider: str
    status: str
    risk_score: float
    explanation: str
    created_at: datetime
    risk_factors: List[str]


class TransactionListResponse(BaseModel):
    transactions: List[TransactionSchema]
    count: int


class TransactionStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    successful: int
    blocked: int
    total_amount: int
    average_risk_score: float
    provider_breakdown: Dict[str, int]


class SubscriptionRequestSchema(BaseModel):
    """Request body for POST /v1/subscriptions"""

    donor_id: str = Field(..., min_length=1, max_length=128)
    amount: int = Field(..., gt=0, description="Amount per interval in minor units")
    currency: str = Field(..., pattern=r"^[A-Za-z]{3}$")
    interval: Literal["daily", "weekly", "monthly", "yearly"]
    campaign_description: str = Field(..., min_length=1, max_length=2000)


class SubscriptionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    donor_id: str
    amount: int
    currency: str
    interval: str
    campaign_description: str
    tags: List[str]
    summary: str
    created_at: datetime
    last_charged_at: Optional[datetime] = None
    next_charge_at: datetime
    is_active: bool


class SubscriptionListResponse(BaseModel):
    subscriptions: List[SubscriptionSchema]
    count: int


class SubscriptionStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_active: int
    total_cancelled: int
    monthly_recurring_revenue: float
    campaigns_by_tag: Dict[str, int]
    interval_breakdown: Dict[str, int]


class CancelResponse(BaseModel):
    message: str
    donor_id: str


class SweepResponse(BaseModel):
    """Response for POST /v1/subscriptions/process-charges"""

    triggered: bool
    due: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0


class SubscriptionTransactionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    subscription_id: str
    donor_id: str
    amount: int
    currency: str
    status: str
    created_at: datetime
    type: str


class SubscriptionTransactionListResponse(BaseModel):
    donor_id: Optional[str] = None
    transactions: List[SubscriptionTransactionSchema]
    count: int


class ClearTransactionsResponse(BaseModel):
    """Response for DELETE /v1/transactions"""

    message: str
    removed: int
