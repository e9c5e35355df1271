"""/v1/subscriptions - Recurring donation lifecycle endpoints"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from payment_proxy.api.dependencies import get_gateway, get_request_id, get_settings
from payment_proxy.api.v1.schemas import (
    CancelResponse,
    SubscriptionListResponse,
    SubscriptionRequestSchema,
    SubscriptionSchema,
    SubscriptionStatsResponse,
    SweepResponse,
)
from payment_proxy.config import Settings
from payment_proxy.domain.models import SubscriptionRequest
from payment_proxy.services.gateway import PaymentGateway

router = APIRouter()


@router.post("/subscriptions", response_model=SubscriptionSchema, status_code=201)
async def create_subscription(
    request_body: SubscriptionRequestSchema,
    request: Request,
    gateway: PaymentGateway = Depends(get_gateway),
):
    """
    Create a subscription with campaign tags and summary.

    Rejects with 409 when the donor already has an active subscription; a
    cancelled one is replaced.
    """
    try:
        subscription = await gateway.create_subscription(
            SubscriptionRequest(
                donor_id=request_body.donor_id,
                amount=request_body.amount,
                currency=request_body.currency.upper(),
                interval=request_body.interval,
                campaign_description=request_body.campaign_description,
            ),
            reject_if_active=True,
        )
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Failed to create subscription")

    if subscription is None:
        raise HTTPException(status_code=409, detail="Donor already has an active subscription")

    return SubscriptionSchema.model_validate(subscription)


@router.get("/subscriptions", response_model=SubscriptionListResponse)
def list_active_subscriptions(gateway: PaymentGateway = Depends(get_gateway)):
    subscriptions = gateway.active_subscriptions()
    return SubscriptionListResponse(
        subscriptions=[SubscriptionSchema.model_validate(s) for s in subscriptions],
        count=len(subscriptions),
    )


@router.get("/subscriptions/stats", response_model=SubscriptionStatsResponse)
def get_subscription_stats(gateway: PaymentGateway = Depends(get_gateway)):
    return SubscriptionStatsResponse.model_validate(gateway.subscription_stats())


@router.post("/subscriptions/process-charges", response_model=SweepResponse)
async def process_charges(
    gateway: PaymentGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    """Manually trigger a recurrence sweep (disabled in production)"""
    if settings.environment == "production":
        raise HTTPException(status_code=403, detail="Manual charge processing is not allowed in production")

    result = await gateway.trigger_recurrence_sweep()
    if result is None:
        return SweepResponse(triggered=False)

    return SweepResponse(
        triggered=True,
        due=result.due,
        succeeded=result.succeeded,
        failed=result.failed,
        skipped=result.skipped,
    )


@router.get("/subscriptions/{donor_id}", response_model=SubscriptionSchema)
def get_subscription(donor_id: str, gateway: PaymentGateway = Depends(get_gateway)):
    subscription = gateway.get_subscription_by_donor(donor_id)

    if not subscription:
        raise HTTPException(status_code=404, detail="Subscription not found")

    return SubscriptionSchema.model_validate(subscription)


@router.delete("/subscriptions/{donor_id}", response_model=CancelResponse)
async def cancel_subscription(donor_id: str, gateway: PaymentGateway = Depends(get_gateway)):
    cancelled = await gateway.cancel_subscription(donor_id)

    if not cancelled:
        raise HTTPException(status_code=404, detail="Subscription not found")

    return CancelResponse(message="Subscription cancelled successfully", donor_id=donor_id)
