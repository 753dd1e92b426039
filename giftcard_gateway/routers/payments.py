"""
Gift card payment routes: POST /create-payment-intent
"""
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request

from ..deps import get_payment_service
from ..middleware import current_rate_limit, limiter
from ..schemas import CreatePaymentIntentRequest, CreatePaymentIntentResponse, ErrorResponse
from ..services.payment_intents import PaymentIntentService

router = APIRouter(tags=["Payments"])


@router.post(
    "/create-payment-intent",
    response_model=CreatePaymentIntentResponse,
    response_model_by_alias=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit(current_rate_limit)
def create_payment_intent(
    request: Request,
    body: Optional[CreatePaymentIntentRequest] = None,
    idempotency_key: Optional[str] = Header(default=None, alias="x-idempotency-key"),
    service: PaymentIntentService = Depends(get_payment_service),
):
    """
    Create a Stripe PaymentIntent for a gift card.

    Runs in the threadpool since the Stripe SDK call blocks.
    """
    intent = service.create(body or CreatePaymentIntentRequest(), idempotency_key=idempotency_key)
    return CreatePaymentIntentResponse(client_secret=intent.client_secret, payment_intent_id=intent.id)
