from .adapter import PaymentIntentRef, PSPAdapter, VerifiedEvent
from .stripe_adapter import StripeAdapter

__all__ = ["PaymentIntentRef", "PSPAdapter", "VerifiedEvent", "StripeAdapter"]
