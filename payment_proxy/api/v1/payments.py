"""POST /v1/charge - Fraud-aware payment routing endpoint"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from payment_proxy.api.dependencies import get_gateway, get_request_id
from payment_proxy.api.v1.schemas import ChargeRequestSchema, ChargeResponse
from payment_proxy.domain.exceptions import RiskScoreOutOfBoundsError
from payment_proxy.domain.models import ChargeRequest
from payment_proxy.services.gateway import PaymentGateway

router = APIRouter()


@router.post("/charge", response_model=ChargeResponse)
async def create_charge(
    request_body: ChargeRequestSchema,
    request: Request,
    gateway: PaymentGateway = Depends(get_gateway),
):
    """
    Score a charge, route it to a provider, and explain the decision.

    Flow:
    1. Compute risk score and risk factors
    2. Route to stripe / paypal, or block
    3. Generate explanation (LLM with cache, template fallback)
    4. Record transaction in the ledger
    """
    request_id = get_request_id(request)

    try:
        result = await gateway.process_charge(
            ChargeRequest(
                amount=request_body.amount,
                currency=request_body.currency.upper(),
                source=request_body.source,
                email=request_body.email,
            )
        )
        return ChargeResponse.model_validate(result)

    except RiskScoreOutOfBoundsError as e:
        logging.error(f"Risk scoring invariant violated: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Risk scoring failed")

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to process charge")
