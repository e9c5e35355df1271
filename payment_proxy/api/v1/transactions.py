"""/v1/transactions - Query and reset the charge ledger"""

from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from payment_proxy.api.dependencies import get_gateway, get_settings
from payment_proxy.api.v1.schemas import (
    ClearTransactionsResponse,
    TransactionListResponse,
    TransactionSchema,
    TransactionStatsResponse,
)
from payment_proxy.config import Settings
from payment_proxy.services.gateway import PaymentGateway
from payment_proxy.utils.date_utils import ensure_utc

router = APIRouter()


@router.get("/transactions", response_model=TransactionListResponse)
def list_transactions(
    provider: Optional[Literal["stripe", "paypal", "blocked"]] = Query(None),
    status: Optional[Literal["success", "blocked"]] = Query(None),
    min_amount: Optional[int] = Query(None, ge=0),
    max_amount: Optional[int] = Query(None, ge=0),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    gateway: PaymentGateway = Depends(get_gateway),
):
    """
    Retrieve transactions matching all provided filters.

    Returns:
        Transactions sorted newest first
    """
    transactions = gateway.list_transactions(
        provider=provider,
        status=status,
        min_amount=min_amount,
        max_amount=max_amount,
        start_date=ensure_utc(start_date) if start_date else None,
        end_date=ensure_utc(end_date) if end_date else None,
    )
    return TransactionListResponse(
        transactions=[TransactionSchema.model_validate(t) for t in transactions],
        count=len(transactions),
    )


@router.delete("/transactions", response_model=ClearTransactionsResponse)
def clear_transactions(
    gateway: PaymentGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    """Clear the charge ledger (disabled in production)"""
    if settings.environment == "production":
        raise HTTPException(status_code=403, detail="Clearing transactions is not allowed in production")

    removed = gateway.clear_transactions()
    return ClearTransactionsResponse(message="All transactions cleared", removed=removed)


@router.get("/transactions/stats", response_model=TransactionStatsResponse)
def get_transaction_stats(gateway: PaymentGateway = Depends(get_gateway)):
    return TransactionStatsResponse.model_validate(gateway.transaction_stats())


@router.get("/transactions/{transaction_id}", response_model=TransactionSchema)
def get_transaction(transaction_id: str, gateway: PaymentGateway = Depends(get_gateway)):
    transaction = gateway.get_transaction(transaction_id)

    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")

    return TransactionSchema.model_validate(transaction)
