"""
Structured logging configuration using structlog.
"""
import logging
import os
import sys
from typing import Any, Dict

import structlog

# Configure standard library logging
logging.basicConfig(
    format="%(message)s",
    stream=sys.stdout,
    level=logging.INFO,
)


# Bound once by configure_logging
_app_context: Dict[str, str] = {"app": "giftcard-gateway", "environment": "production"}


def add_app_context(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    """Add application context to log entries."""
    event_dict.update(_app_context)
    return event_dict


def configure_logging(level: str = "INFO", environment: str = "production"):
    """Configure structlog with processors."""
    _app_context["environment"] = environment
    logging.getLogger().setLevel(level.upper())
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            add_app_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Initialize logging
configure_logging(os.getenv("LOG_LEVEL", "INFO"), os.getenv("ENVIRONMENT", "production"))


def get_logger(name: str = __name__):
    """Get a structured logger instance."""
    return structlog.get_logger(name)
