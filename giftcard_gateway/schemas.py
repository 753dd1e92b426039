"""Request and response bodies for the public API."""
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

# Free text is attached to the intent as Stripe metadata, which rejects
# oversized values.
NAME_MAX = 120
EMAIL_MAX = 200
PHONE_MAX = 50
MESSAGE_MAX = 300


def _safe(value: Any, limit: int) -> str:
    return value[:limit] if isinstance(value, str) else ""


class CreatePaymentIntentRequest(BaseModel):
    """Body of POST /create-payment-intent.

    Fields are left untyped so that amount problems surface as 400s
    from the amount rules rather than as framework validation errors.
    """

    model_config = ConfigDict(extra="ignore")

    amount: Any = None
    name: Any = None
    email: Any = None
    phone: Any = None
    message: Any = None
    preset: Any = False

    def metadata(self) -> Dict[str, str]:
        return {
            "name": _safe(self.name, NAME_MAX),
            "email": _safe(self.email, EMAIL_MAX),
            "phone": _safe(self.phone, PHONE_MAX),
            "note": _safe(self.message, MESSAGE_MAX),
            "purpose": "gift_card",
        }


class CreatePaymentIntentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_secret: str = Field(..., alias="clientSecret")
    payment_intent_id: str = Field(..., alias="paymentIntentId")


class WebhookAck(BaseModel):
    received: bool = True


class HealthResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    error: str
