"""
Forwarding of paid gift card orders to the n8n workflow webhook.

- build_forward_payload: verified Stripe event -> canonical payload
- serialize_payload: payload -> exact bytes that go on the wire
- KeyedSigner / UnsignedSigner: optional HMAC-SHA256 over those bytes
- Forwarder: single best-effort POST, never raises
"""
import hashlib
import hmac
import json
from typing import Any, Dict, Optional, Union

import httpx

from ..errors import ForwardingFailed
from ..logging_config import get_logger
from ..psp.adapter import VerifiedEvent

logger = get_logger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
FORWARD_EVENT = "gift_card_purchased"


def build_forward_payload(event: VerifiedEvent) -> Optional[Dict[str, Any]]:
    """Map a verified event to the forwarding payload.

    Returns None for every event type other than payment_intent.succeeded.
    Customer fields missing from the intent metadata become "" so the
    receiving workflow always sees the same shape.
    """
    if event.type != PAYMENT_SUCCEEDED:
        return None

    pi = event.data_object
    metadata = pi.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}

    return {
        "event": FORWARD_EVENT,
        "amount": pi.get("amount"),
        "currency": pi.get("currency"),
        "payment_intent_id": pi.get("id"),
        "created": pi.get("created"),
        "customer": {
            "name": metadata.get("name") or "",
            "email": metadata.get("email") or "",
            "phone": metadata.get("phone") or "",
        },
    }


def serialize_payload(payload: Dict[str, Any]) -> bytes:
    # Compact, key order as built
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


class KeyedSigner:
    """Signs forwarded bodies with HMAC-SHA256, hex encoded."""

    def __init__(self, secret: str, header: str = "X-OKO-Signature"):
        self._secret = secret.encode("utf-8")
        self.header = header

    def sign(self, body: bytes) -> str:
        return hmac.new(self._secret, body, hashlib.sha256).hexdigest()

    def headers(self, body: bytes) -> Dict[str, str]:
        return {self.header: self.sign(body)}

    def __repr__(self) -> str:
        return f"KeyedSigner(header={self.header!r})"


class UnsignedSigner:
    """Used when no forwarding secret is configured; adds no header."""

    def headers(self, body: bytes) -> Dict[str, str]:
        return {}

    def __repr__(self) -> str:
        return "UnsignedSigner()"


Signer = Union[KeyedSigner, UnsignedSigner]


def build_signer(secret: Optional[str], header: str = "X-OKO-Signature") -> Signer:
    if secret:
        return KeyedSigner(secret, header=header)
    return UnsignedSigner()


class Forwarder:
    """Delivers forwarding payloads to the downstream workflow URL.

    One attempt per payload. Failures are logged and reported through the
    return value only.
    """

    def __init__(
        self,
        url: Optional[str],
        signer: Signer,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.signer = signer
        self.timeout = timeout
        self._transport = transport

    def build_request(self, payload: Dict[str, Any]):
        """Return (body, headers) for a payload; the signature covers body."""
        body = serialize_payload(payload)
        headers = {"Content-Type": "application/json"}
        headers.update(self.signer.headers(body))
        return body, headers

    async def forward(self, payload: Dict[str, Any]) -> bool:
        if not self.url:
            logger.warning(
                "forward_skipped",
                reason="N8N_FORWARD_URL not configured",
                payment_intent_id=payload.get("payment_intent_id"),
            )
            return False

        body, headers = self.build_request(payload)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, content=body, headers=headers)
            if not response.is_success:
                raise ForwardingFailed(f"Downstream responded {response.status_code}")
        except (httpx.HTTPError, httpx.InvalidURL, ForwardingFailed) as e:
            logger.error(
                "forward_failed",
                error=str(e),
                error_type=type(e).__name__,
                payment_intent_id=payload.get("payment_intent_id"),
            )
            return False

        logger.info(
            "forward_delivered",
            status_code=response.status_code,
            payment_intent_id=payload.get("payment_intent_id"),
            signed=isinstance(self.signer, KeyedSigner),
        )
        return True
