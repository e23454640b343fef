# =============================================================================
# Sentry Error Tracking Integration
# =============================================================================
#
# Setup:
#   Set PAGELINGO_SENTRY_DSN=https://...@sentry.io/... in the environment
#
# Usage:
#   Call init_sentry() once when the host starts. Background loops report
#   swallowed errors through capture_exception(), which only logs while
#   Sentry is not initialized.
#
# =============================================================================

import logging

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from pagelingo.config import Settings, get_settings

logger = logging.getLogger(__name__)


def init_sentry(settings: Settings | None = None) -> bool:
    """
    Initialize Sentry error tracking.

    Returns True if initialized, False if skipped.
    """
    settings = settings or get_settings()

    if not settings.sentry_dsn:
        logger.info("PAGELINGO_SENTRY_DSN not set - error tracking disabled")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        integrations=[
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR,
            ),
        ],
        # Page text may be personal data
        send_default_pii=False,
        before_send=_filter_events,
    )

    logger.info(f"Sentry initialized for {settings.environment}")
    return True


def _filter_events(event: dict, hint: dict) -> dict | None:
    """Drop document text from reports."""
    for key, value in event.get("extra", {}).items():
        if key in ("text", "source", "translated"):
            event["extra"][key] = "[Filtered]"
    return event


def is_enabled() -> bool:
    return sentry_sdk.get_client().is_active()


def capture_exception(error: Exception, **context) -> str | None:
    """
    Capture an exception to Sentry.

    Returns the event ID if captured, None otherwise.
    """
    if not is_enabled():
        logger.error("Error (Sentry disabled)", exc_info=error)
        return None

    with sentry_sdk.new_scope() as scope:
        for key, value in context.items():
            scope.set_extra(key, value)
        return sentry_sdk.capture_exception(error)


def capture_message(message: str, level: str = "info", **context) -> str | None:
    """
    Capture a message to Sentry.

    Levels: fatal, error, warning, info, debug
    """
    if not is_enabled():
        logger.log(getattr(logging, level.upper(), logging.INFO), message)
        return None

    with sentry_sdk.new_scope() as scope:
        for key, value in context.items():
            scope.set_extra(key, value)
        return sentry_sdk.capture_message(message, level=level)


def set_tag(key: str, value: str) -> None:
    """Add a tag for filtering in Sentry."""
    if is_enabled():
        sentry_sdk.set_tag(key, value)
