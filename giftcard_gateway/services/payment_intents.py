"""
Payment intent creation for gift card purchases.
"""
import uuid
from typing import Optional

import stripe

from ..errors import UpstreamError
from ..logging_config import get_logger
from ..psp.adapter import PaymentIntentRef, PSPAdapter
from ..schemas import CreatePaymentIntentRequest
from .amounts import validate_amount

logger = get_logger(__name__)


class PaymentIntentService:
    """Validates creation requests and opens intents with the PSP."""

    def __init__(self, adapter: PSPAdapter, currency: str = "chf", description: Optional[str] = None):
        self.adapter = adapter
        self.currency = currency
        self.description = description

    def create(
        self,
        request: CreatePaymentIntentRequest,
        idempotency_key: Optional[str] = None,
    ) -> PaymentIntentRef:
        """
        Create a payment intent for a gift card.

        Args:
            request: Parsed creation request
            idempotency_key: Client supplied key; a fresh UUID4 is used if absent

        Returns:
            PaymentIntentRef with the intent id and client secret

        Raises:
            AmountValidationError: amount or preset rejected (400)
            UpstreamError: Stripe call failed (500, detail only in logs)
        """
        amount = validate_amount(request.amount, request.preset)
        key = idempotency_key or str(uuid.uuid4())

        try:
            intent = self.adapter.create_payment_intent(
                amount=amount,
                currency=self.currency,
                metadata=request.metadata(),
                idempotency_key=key,
                description=self.description,
            )
        except stripe.StripeError as e:
            logger.error(
                "payment_intent_create_failed",
                error=str(e),
                error_type=type(e).__name__,
                stripe_code=getattr(e, "code", None),
                http_status=getattr(e, "http_status", None),
                request_id=getattr(e, "request_id", None),
                amount=amount,
                idempotency_key=key,
            )
            raise UpstreamError() from e
        except Exception as e:
            logger.exception(
                "payment_intent_create_error",
                error_type=type(e).__name__,
                amount=amount,
                idempotency_key=key,
            )
            raise UpstreamError() from e

        logger.info(
            "payment_intent_created",
            payment_intent_id=intent.id,
            amount=amount,
            currency=self.currency,
            idempotency_key=key,
        )
        return intent
