"""Gift card payment gateway: Stripe intents in, n8n notifications out."""

__version__ = "1.0.0"
