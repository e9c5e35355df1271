"""GET /v1/subscription-transactions - Recurring charge history"""

from fastapi import APIRouter, Depends

from payment_proxy.api.dependencies import get_gateway
from payment_proxy.api.v1.schemas import SubscriptionTransactionListResponse, SubscriptionTransactionSchema
from payment_proxy.services.gateway import PaymentGateway

router = APIRouter()


@router.get("/subscription-transactions", response_model=SubscriptionTransactionListResponse)
def list_subscription_transactions(gateway: PaymentGateway = Depends(get_gateway)):
    transactions = gateway.list_subscription_transactions()
    return SubscriptionTransactionListResponse(
        transactions=[SubscriptionTransactionSchema.model_validate(t) for t in transactions],
        count=len(transactions),
    )


@router.get("/subscription-transactions/{donor_id}", response_model=SubscriptionTransactionListResponse)
def list_donor_transactions(donor_id: str, gateway: PaymentGateway = Depends(get_gateway)):
    transactions = gateway.list_subscription_transactions(donor_id)
    return SubscriptionTransactionListResponse(
        donor_id=donor_id,
        transactions=[SubscriptionTransactionSchema.model_validate(t) for t in transactions],
        count=len(transactions),
    )
