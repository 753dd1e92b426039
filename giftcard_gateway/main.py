# giftcard_gateway/main.py

from typing import Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, load_settings, validate_settings
from .errors import GatewayError, SignatureInvalid
from .logging_config import configure_logging, get_logger
from .middleware import install_middleware
from .psp.stripe_adapter import StripeAdapter
from .routers import health, payments, webhooks_stripe
from .services.forwarding import Forwarder, build_signer
from .services.payment_intents import PaymentIntentService
from .services.webhook_service import WebhookService

logger = get_logger(__name__)


# ---------------------------------------------
# ERROR HANDLERS
# ---------------------------------------------
async def signature_invalid_handler(request: Request, exc: SignatureInvalid):
    return PlainTextResponse(f"Webhook Error: {exc.message}", status_code=exc.status_code)


async def gateway_error_handler(request: Request, exc: GatewayError):
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("request_body_invalid", errors=len(exc.errors()))
    return JSONResponse({"error": "Invalid request body"}, status_code=400)


async def unhandled_error_handler(request: Request, exc: Exception):
    return JSONResponse({"error": "Server error"}, status_code=500)


# ---------------------------------------------
# APP FACTORY
# ---------------------------------------------
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application from validated settings.

    Without explicit settings they are read from the environment and .env;
    a missing STRIPE_SECRET_KEY raises ConfigMissing and the app is not built.
    """
    if settings is None:
        load_dotenv()
        settings = load_settings()
    else:
        validate_settings(settings)

    adapter = StripeAdapter(
        api_key=settings.STRIPE_SECRET_KEY,
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        api_version=settings.STRIPE_API_VERSION,
        tolerance=settings.STRIPE_WEBHOOK_TOLERANCE,
        app_name=settings.APP_NAME,
        app_version=settings.APP_VERSION,
    )
    signer = build_signer(settings.FORWARD_SIGNING_SECRET, header=settings.FORWARD_SIGNATURE_HEADER)
    forwarder = Forwarder(
        settings.N8N_FORWARD_URL,
        signer,
        timeout=settings.FORWARD_TIMEOUT_SECONDS,
    )

    app = FastAPI(
        title=f"{settings.APP_NAME} Payments API",
        version=settings.APP_VERSION,
    )
    app.state.settings = settings
    app.state.payment_service = PaymentIntentService(
        adapter,
        currency=settings.PAYMENT_CURRENCY,
        description=settings.PAYMENT_DESCRIPTION,
    )
    app.state.webhook_service = WebhookService(adapter, forwarder)

    app.add_exception_handler(SignatureInvalid, signature_invalid_handler)
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    install_middleware(app, settings)

    # ---------------------------------------------
    # ROUTERS
    # ---------------------------------------------
    app.include_router(health.router)
    app.include_router(payments.router)
    app.include_router(webhooks_stripe.router)

    logger.info(
        "app_configured",
        forward_url_configured=bool(settings.N8N_FORWARD_URL),
        forward_signer=repr(signer),
        allowed_origins=settings.ALLOWED_ORIGINS,
    )
    return app


def run() -> None:
    """Console entry point: build the app and serve it with uvicorn."""
    load_dotenv()
    settings = Settings()
    configure_logging(settings.LOG_LEVEL, environment=settings.ENVIRONMENT)
    app = create_app(settings)
    logger.info("server_starting", host=settings.HOST, port=settings.PORT)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, server_header=False, log_config=None)


if __name__ == "__main__":
    run()
