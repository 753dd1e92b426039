# giftcard_gateway/routers/__init__.py

from . import health, payments, webhooks_stripe

__all__ = ["health", "payments", "webhooks_stripe"]
