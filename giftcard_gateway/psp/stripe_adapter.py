"""Stripe PSP Adapter Implementation."""
import json
from typing import Any, Dict, Optional

import stripe

from ..errors import SignatureInvalid
from ..logging_config import get_logger
from .adapter import PaymentIntentRef, PSPAdapter, VerifiedEvent

logger = get_logger(__name__)


class StripeAdapter(PSPAdapter):
    """Stripe payment gateway adapter.

    The API key and API version are passed on every request instead of being
    assigned to ``stripe.api_key``, so several adapters (or tests) can coexist
    in one process.
    """

    def __init__(
        self,
        api_key: str,
        webhook_secret: Optional[str] = None,
        api_version: Optional[str] = None,
        tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE,
        app_name: Optional[str] = None,
        app_version: Optional[str] = None,
    ):
        """Initialize Stripe adapter."""
        self.api_key = api_key
        self.webhook_secret = webhook_secret  # Stripe webhook signing secret
        self.api_version = api_version
        self.tolerance = tolerance
        if app_name:
            stripe.set_app_info(app_name, version=app_version)

    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: Dict[str, str],
        idempotency_key: str,
        description: Optional[str] = None,
    ) -> PaymentIntentRef:
        """Create Stripe payment intent.

        Raises stripe.StripeError on any processor-side failure.
        """
        params: Dict[str, Any] = {
            "amount": amount,
            "currency": currency,
            "automatic_payment_methods": {"enabled": True},
            "metadata": metadata,
            "idempotency_key": idempotency_key,
            "api_key": self.api_key,
        }
        if description:
            params["description"] = description
        if self.api_version:
            params["stripe_version"] = self.api_version

        intent = stripe.PaymentIntent.create(**params)
        return PaymentIntentRef(id=intent.id, client_secret=intent.client_secret)

    def verify_webhook(self, payload: bytes, signature: Optional[str]) -> VerifiedEvent:
        """Verify Stripe webhook signature over the raw request body.

        Uses Stripe's own ``t=...,v1=...`` scheme, including its timestamp
        tolerance and support for several ``v1`` signatures in one header.
        The body is only parsed once the signature has been accepted.
        """
        if not self.webhook_secret:
            raise SignatureInvalid("Webhook secret not configured")
        if not signature:
            raise SignatureInvalid("Missing signature header")

        try:
            body = payload.decode("utf-8")
        except UnicodeDecodeError:
            raise SignatureInvalid("Invalid payload") from None

        try:
            stripe.WebhookSignature.verify_header(
                body, signature, self.webhook_secret, self.tolerance
            )
        except stripe.SignatureVerificationError as e:
            logger.warning("webhook_signature_invalid", reason=str(e))
            raise SignatureInvalid("Invalid signature") from None

        try:
            data = json.loads(body)
        except ValueError:
            raise SignatureInvalid("Invalid payload") from None
        if not isinstance(data, dict):
            raise SignatureInvalid("Invalid payload")

        event_data = data.get("data")
        data_object = event_data.get("object") if isinstance(event_data, dict) else None
        return VerifiedEvent(
            id=data.get("id"),
            type=str(data.get("type") or ""),
            data_object=data_object if isinstance(data_object, dict) else {},
        )
