import hashlib
import hmac
import json
import unittest

import anyio
import httpx

from giftcard_gateway.psp.adapter import VerifiedEvent
from giftcard_gateway.services.forwarding import (
    FORWARD_EVENT,
    Forwarder,
    KeyedSigner,
    UnsignedSigner,
    build_forward_payload,
    build_signer,
    serialize_payload,
)

FORWARD_URL = "https://n8n.example.com/webhook/gift-card"


def succeeded_event(metadata=None) -> VerifiedEvent:
    return VerifiedEvent(
        id="evt_1",
        type="payment_intent.succeeded",
        data_object={
            "id": "pi_1",
            "amount": 10000,
            "currency": "chf",
            "created": 1718000000,
            "metadata": {"name": "Anna", "email": "anna@example.ch", "phone": "+41791234567"}
            if metadata is None else metadata,
        },
    )


class TestBuildForwardPayload(unittest.TestCase):
    def test_maps_succeeded_intent(self):
        payload = build_forward_payload(succeeded_event())
        self.assertEqual(
            payload,
            {
                "event": FORWARD_EVENT,
                "amount": 10000,
                "currency": "chf",
                "payment_intent_id": "pi_1",
                "created": 1718000000,
                "customer": {"name": "Anna", "email": "anna@example.ch", "phone": "+41791234567"},
            },
        )
        self.assertEqual(
            list(payload),
            ["event", "amount", "currency", "payment_intent_id", "created", "customer"],
        )

    def test_missing_metadata_defaults_to_empty_strings(self):
        for metadata in ({}, {"name": None}, None, "garbage"):
            event = VerifiedEvent(
                id="evt_1",
                type="payment_intent.succeeded",
                data_object={"id": "pi_1", "amount": 5000, "metadata": metadata},
            )
            payload = build_forward_payload(event)
            self.assertEqual(payload["customer"], {"name": "", "email": "", "phone": ""})

    def test_other_event_types_produce_nothing(self):
        for event_type in ("payment_intent.payment_failed", "charge.succeeded", "checkout.session.completed", ""):
            event = VerifiedEvent(id="evt_2", type=event_type, data_object={"id": "pi_2"})
            self.assertIsNone(build_forward_payload(event))

    def test_same_event_gives_identical_bytes(self):
        event = succeeded_event()
        first = serialize_payload(build_forward_payload(event))
        second = serialize_payload(build_forward_payload(event))
        self.assertEqual(first, second)
        self.assertTrue(first.startswith(b'{"event":"gift_card_purchased","amount":10000,'))

    def test_serialization_keeps_non_ascii(self):
        body = serialize_payload({"customer": {"name": "Zoë Müller"}})
        self.assertEqual(body, '{"customer":{"name":"Zoë Müller"}}'.encode("utf-8"))


class TestSigners(unittest.TestCase):
    def test_keyed_signer_matches_reference_hmac(self):
        body = serialize_payload(build_forward_payload(succeeded_event()))
        signer = KeyedSigner("fwd_secret")
        expected = hmac.new(b"fwd_secret", body, hashlib.sha256).hexdigest()

        self.assertEqual(signer.sign(body), expected)
        self.assertEqual(signer.headers(body), {"X-OKO-Signature": expected})
        self.assertEqual(expected, expected.lower())

    def test_build_signer_selects_variant(self):
        self.assertIsInstance(build_signer("s3cret"), KeyedSigner)
        self.assertIsInstance(build_signer(None), UnsignedSigner)
        self.assertIsInstance(build_signer(""), UnsignedSigner)
        self.assertEqual(UnsignedSigner().headers(b"{}"), {})

    def test_repr_never_shows_secret(self):
        self.assertNotIn("s3cret", repr(KeyedSigner("s3cret")))


class TestForwarder(unittest.TestCase):
    def setUp(self):
        self.requests = []
        self.payload = build_forward_payload(succeeded_event())

    def transport(self, status_code=200, exc=None):
        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            if exc is not None:
                raise exc("downstream unreachable", request=request)
            return httpx.Response(status_code, json={"ok": True})

        return httpx.MockTransport(handler)

    def test_signed_delivery(self):
        forwarder = Forwarder(FORWARD_URL, KeyedSigner("fwd_secret"), transport=self.transport())
        delivered = anyio.run(forwarder.forward, self.payload)

        self.assertTrue(delivered)
        self.assertEqual(len(self.requests), 1)
        request = self.requests[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(str(request.url), FORWARD_URL)
        self.assertEqual(request.headers["content-type"], "application/json")
        self.assertEqual(json.loads(request.content), self.payload)
        expected = hmac.new(b"fwd_secret", request.content, hashlib.sha256).hexdigest()
        self.assertEqual(request.headers["x-oko-signature"], expected)

    def test_custom_signature_header(self):
        forwarder = Forwarder(FORWARD_URL, KeyedSigner("k", header="X-Shop-Signature"), transport=self.transport())
        anyio.run(forwarder.forward, self.payload)
        self.assertIn("x-shop-signature", self.requests[0].headers)
        self.assertNotIn("x-oko-signature", self.requests[0].headers)

    def test_unsigned_delivery(self):
        forwarder = Forwarder(FORWARD_URL, UnsignedSigner(), transport=self.transport())
        self.assertTrue(anyio.run(forwarder.forward, self.payload))
        self.assertNotIn("x-oko-signature", self.requests[0].headers)

    def test_error_status_is_swallowed(self):
        forwarder = Forwarder(FORWARD_URL, UnsignedSigner(), transport=self.transport(status_code=503))
        self.assertFalse(anyio.run(forwarder.forward, self.payload))
        self.assertEqual(len(self.requests), 1)

    def test_network_errors_are_swallowed(self):
        for exc in (httpx.ConnectError, httpx.ReadTimeout):
            forwarder = Forwarder(FORWARD_URL, UnsignedSigner(), transport=self.transport(exc=exc))
            self.assertFalse(anyio.run(forwarder.forward, self.payload))

    def test_missing_url_skips_delivery(self):
        forwarder = Forwarder(None, UnsignedSigner(), transport=self.transport())
        self.assertFalse(anyio.run(forwarder.forward, self.payload))
        self.assertEqual(self.requests, [])


if __name__ == "__main__":
    unittest.main()
