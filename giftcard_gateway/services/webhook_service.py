"""
Stripe webhook processing: verify, transform, hand off for forwarding.
"""
from typing import Any, Dict, Optional

from ..logging_config import get_logger
from ..psp.adapter import PSPAdapter, VerifiedEvent
from .forwarding import Forwarder, build_forward_payload

logger = get_logger(__name__)


class WebhookService:
    def __init__(self, adapter: PSPAdapter, forwarder: Forwarder):
        self.adapter = adapter
        self.forwarder = forwarder

    def verify(self, payload: bytes, signature: Optional[str]) -> VerifiedEvent:
        """Raises SignatureInvalid; nothing downstream re-checks authenticity."""
        event = self.adapter.verify_webhook(payload, signature)
        logger.info("webhook_verified", event_id=event.id, event_type=event.type)
        return event

    def handle(self, payload: bytes, signature: Optional[str]) -> Optional[Dict[str, Any]]:
        """Verify an inbound webhook and return the payload to forward, if any.

        The caller acknowledges the event as soon as this returns and delivers
        the payload afterwards.
        """
        event = self.verify(payload, signature)
        forward_payload = build_forward_payload(event)
        if forward_payload is None:
            logger.info("webhook_ignored", event_id=event.id, event_type=event.type)
        return forward_payload

    async def deliver(self, forward_payload: Dict[str, Any]) -> bool:
        return await self.forwarder.forward(forward_payload)
