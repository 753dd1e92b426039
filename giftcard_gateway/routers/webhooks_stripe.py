"""
Stripe webhooks: POST /webhook
- Verifies the Stripe-Signature header against the raw, unparsed body
- Acknowledges every verified event with {"received": true}
- On payment_intent.succeeded, forwards a gift_card_purchased payload to n8n
  after the response has been sent
"""
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Request

from ..deps import get_webhook_service
from ..middleware import current_rate_limit, limiter
from ..schemas import WebhookAck
from ..services.webhook_service import WebhookService

router = APIRouter(tags=["Stripe Webhooks"])


@router.post("/webhook", response_model=WebhookAck)
@limiter.limit(current_rate_limit)
async def webhook_stripe(
    request: Request,
    background_tasks: BackgroundTasks,
    stripe_signature: Optional[str] = Header(default=None, alias="stripe-signature"),
    service: WebhookService = Depends(get_webhook_service),
):
    payload = await request.body()

    # SignatureInvalid propagates to the 400 handler
    forward_payload = service.handle(payload, stripe_signature)
    if forward_payload is not None:
        background_tasks.add_task(service.deliver, forward_payload)

    return {"received": True}
