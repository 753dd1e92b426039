"""FastAPI dependencies resolving the collaborators built at startup."""
from fastapi import Request

from .services.payment_intents import PaymentIntentService
from .services.webhook_service import WebhookService


def get_payment_service(request: Request) -> PaymentIntentService:
    return request.app.state.payment_service


def get_webhook_service(request: Request) -> WebhookService:
    return request.app.state.webhook_service
