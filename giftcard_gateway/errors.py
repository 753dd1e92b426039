"""
Error taxonomy for the gateway.

Every error carries the message that is safe to show to the caller and the
HTTP status the API layer responds with. Detail that must stay server-side
(processor error bodies, network errors) goes to the log, never into the
message.
"""
from typing import Optional


class GatewayError(Exception):
    """Base class for all gateway errors."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ConfigMissing(GatewayError):
    """A required setting is absent. Fatal at startup."""

    def __init__(self, setting: str):
        super().__init__(f"Missing {setting}")
        self.setting = setting


class SignatureInvalid(GatewayError):
    """Inbound webhook failed signature verification."""

    status_code = 400


class AmountValidationError(GatewayError):
    status_code = 400


class InvalidAmount(AmountValidationError):
    def __init__(self, message: str = "Invalid amount"):
        super().__init__(message)


class InvalidPreset(AmountValidationError):
    def __init__(self, message: str = "Invalid preset amount"):
        super().__init__(message)


class AmountOutOfRange(AmountValidationError):
    def __init__(self, message: str = "Amount out of range"):
        super().__init__(message)


class UpstreamError(GatewayError):
    """Stripe call failed. The caller only ever sees a generic message."""

    def __init__(self, message: str = "Server error"):
        super().__init__(message, status_code=500)


class ForwardingFailed(GatewayError):
    """Downstream delivery failed. Logged, never surfaced."""

    status_code = 502


class CrossOriginRejected(GatewayError):
    def __init__(self, origin: str):
        super().__init__("Not allowed by CORS", status_code=403)
        self.origin = origin
