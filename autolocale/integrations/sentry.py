# =============================================================================
# Sentry Error Tracking Integration
# =============================================================================
#
# Setup:
#   1. Create a Python project at sentry.io
#   2. Copy DSN to .env: SENTRY_DSN=https://...@sentry.io/...
#
# Usage:
#   init_sentry() runs in the API lifespan (autolocale/api/app.py).
#   capture_exception() is safe to call whether or not Sentry is active.
#
# =============================================================================

import logging
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from autolocale.config import Settings, get_settings

logger = logging.getLogger(__name__)


def init_sentry(settings: Settings | None = None) -> bool:
    """
    Initialize Sentry error tracking.

    Returns True if initialized, False if skipped.
    """
    settings = settings or get_settings()

    if not settings.sentry_dsn:
        logger.info("SENTRY_DSN not set - error tracking disabled")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR,
            ),
        ],
        send_default_pii=False,
        before_send=_filter_events,
        before_send_transaction=_filter_transactions,
    )

    logger.info(f"Sentry initialized for {settings.environment}")
    return True


def _filter_events(event: dict, hint: dict) -> dict | None:
    """Drop auth failures and scrub bearer tokens and DeepL keys from requests."""
    if "exc_info" in hint:
        _, exc_value, _ = hint["exc_info"]

        from fastapi import HTTPException
        if isinstance(exc_value, HTTPException) and exc_value.status_code in (401, 403, 404, 422):
            return None

    request = event.get("request") or {}
    headers = request.get("headers") or {}
    for key in list(headers.keys()):
        if key.lower() in ("authorization", "cookie", "x-api-key"):
            headers[key] = "[Filtered]"

    data = request.get("data")
    if isinstance(data, dict) and "auth_key" in data:
        data["auth_key"] = "[Filtered]"

    return event


def _filter_transactions(event: dict, hint: dict) -> dict | None:
    """Skip health probes."""
    if event.get("transaction", "") in ("/health", "/healthz"):
        return None
    return event


def is_active() -> bool:
    return sentry_sdk.get_client().is_active()


def capture_exception(error: Exception, **context: Any) -> str | None:
    """
    Capture an exception to Sentry.

    Returns the event ID if captured, None otherwise (the error is logged).
    """
    if not is_active():
        logger.error(f"Error (Sentry disabled): {error!r} {context or ''}")
        return None

    with sentry_sdk.new_scope() as scope:
        for key, value in context.items():
            scope.set_extra(key, value)
        return sentry_sdk.capture_exception(error)

