"""Shared helpers for the test suite."""
import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional

from giftcard_gateway.config import Settings

WEBHOOK_SECRET = "whsec_test_secret"
FORWARD_URL = "https://n8n.example.com/webhook/gift-card"


def make_settings(**overrides) -> Settings:
    values: Dict[str, Any] = {
        "STRIPE_SECRET_KEY": "sk_test_fake_key_for_testing",
        "STRIPE_WEBHOOK_SECRET": WEBHOOK_SECRET,
        "N8N_FORWARD_URL": FORWARD_URL,
        "FORWARD_SIGNING_SECRET": None,
        "ALLOWED_ORIGINS": ["https://shop.example.com"],
        "APP_NAME": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def stripe_signature(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Build a Stripe-Signature header the way Stripe signs webhooks."""
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.".encode("utf-8") + payload
    v1 = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={v1}"


def stripe_event(event_type: str = "payment_intent.succeeded", metadata: Optional[Dict[str, Any]] = None) -> bytes:
    event = {
        "id": "evt_1PgiftTEST",
        "object": "event",
        "type": event_type,
        "data": {
            "object": {
                "id": "pi_3PgiftTEST",
                "object": "payment_intent",
                "amount": 5000,
                "currency": "chf",
                "created": 1718000000,
                "status": "succeeded",
                "metadata": {
                    "name": "Anna Muster",
                    "email": "anna@example.ch",
                    "phone": "+41 79 123 45 67",
                    "note": "Happy birthday",
                    "purpose": "gift_card",
                } if metadata is None else metadata,
            }
        },
    }
    # Stripe sends pretty-printed JSON; keep it that way so tests never rely
    # on re-serialized bodies.
    return json.dumps(event, indent=2).encode("utf-8")
