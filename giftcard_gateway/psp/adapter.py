"""PSP adapter interface and the types it hands back to the services."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class PaymentIntentRef:
    """Handle to a processor-side payment intent. Never stored locally."""

    id: str
    client_secret: str


@dataclass(frozen=True)
class VerifiedEvent:
    """A webhook event whose signature has been checked.

    Only ``PSPAdapter.verify_webhook`` implementations build these.
    """

    id: Optional[str]
    type: str
    data_object: Dict[str, Any] = field(default_factory=dict)


class PSPAdapter(ABC):
    """Base class for payment service provider adapters."""

    @abstractmethod
    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: Dict[str, str],
        idempotency_key: str,
        description: Optional[str] = None,
    ) -> PaymentIntentRef:
        """Create a payment intent with the provider."""

    @abstractmethod
    def verify_webhook(self, payload: bytes, signature: Optional[str]) -> VerifiedEvent:
        """Verify an inbound webhook and return the parsed event.

        Raises SignatureInvalid when the payload cannot be trusted.
        """
