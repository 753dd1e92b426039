"""
Configuration settings for the gift card gateway
Handles environment variables and application settings
"""
from typing import Annotated, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ..errors import ConfigMissing
from ..logging_config import get_logger

logger = get_logger(__name__)


class Settings(BaseSettings):
    """Application settings, read once at startup and never mutated."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields from .env file
        frozen=True,
    )

    # Application
    APP_NAME: str = "OKO Gift Cards"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 4242

    # Stripe
    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_WEBHOOK_SECRET: Optional[str] = None
    STRIPE_API_VERSION: str = "2024-06-20"
    STRIPE_WEBHOOK_TOLERANCE: int = 300  # seconds

    # Payments
    PAYMENT_CURRENCY: str = "chf"
    PAYMENT_DESCRIPTION: str = "Restaurant Gift Card"

    # Forwarding (n8n)
    N8N_FORWARD_URL: Optional[str] = None
    FORWARD_SIGNING_SECRET: Optional[str] = None
    FORWARD_SIGNATURE_HEADER: str = "X-OKO-Signature"
    FORWARD_TIMEOUT_SECONDS: float = 10.0

    # CORS
    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = []

    # Rate limiting
    RATE_LIMIT: str = "120/minute"

    # Request body limits (bytes)
    WEBHOOK_BODY_LIMIT: int = 1024 * 1024
    JSON_BODY_LIMIT: int = 200 * 1024

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator(
        "STRIPE_SECRET_KEY",
        "STRIPE_WEBHOOK_SECRET",
        "N8N_FORWARD_URL",
        "FORWARD_SIGNING_SECRET",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


def validate_settings(settings: Settings) -> Settings:
    """Validate critical settings.

    Raises ConfigMissing when the Stripe secret key is absent; every other
    missing value only produces a warning so the process can still start.
    """
    if not settings.STRIPE_SECRET_KEY:
        raise ConfigMissing("STRIPE_SECRET_KEY")

    if not settings.STRIPE_WEBHOOK_SECRET:
        logger.warning("config_missing", setting="STRIPE_WEBHOOK_SECRET")
    if not settings.N8N_FORWARD_URL:
        logger.warning("config_missing", setting="N8N_FORWARD_URL")
    if not settings.FORWARD_SIGNING_SECRET:
        logger.warning(
            "forward_signing_disabled",
            setting="FORWARD_SIGNING_SECRET",
            detail="forwarded payloads will be sent without a signature header",
        )
    return settings


def load_settings(**overrides) -> Settings:
    """Build and validate settings from the environment (and .env)."""
    return validate_settings(Settings(**overrides))
