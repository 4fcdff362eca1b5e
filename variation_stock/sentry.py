"""
Sentry initialization for centralized error tracking.
Observes reality, never controls logic.
"""
import logging
from typing import Dict, Any

import sentry_sdk
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from variation_stock.config import config
from variation_stock.logger import logger


def initialize_sentry():
    """Initialize Sentry SDK if DSN is configured."""
    if not config.has_sentry:
        logger.info("Sentry not configured, skipping initialization")
        return

    try:
        sentry_sdk.init(
            dsn=config.SENTRY_DSN,
            environment=config.ENVIRONMENT,
            integrations=[
                AsyncioIntegration(),
                LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)
            ],
            traces_sample_rate=0.1,
            send_default_pii=False,
            before_send=_enrich_sentry_event
        )

        logger.info("Sentry initialized for error tracking")

    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {e}")


def _enrich_sentry_event(event: Dict[str, Any], hint: Dict[str, Any]) -> Dict[str, Any]:
    """Tag events with the service name and group them by exception type."""
    event.setdefault("tags", {})
    event["tags"]["system"] = "variation-stock-cache"
    event["tags"]["environment"] = config.ENVIRONMENT

    exceptions = event.get("exception", {}).get("values", [])
    if exceptions:
        exc = exceptions[0]
        event["fingerprint"] = [
            "{{ default }}",
            exc.get("type", "Unknown"),
            exc.get("module", "unknown")
        ]

    return event


def capture_write_failure(parent_id: int, key: str, error: str):
    """Report a failed stock cache write."""
    if not config.has_sentry:
        return

    with sentry_sdk.push_scope() as scope:
        scope.set_tag("error_type", "stock_write")
        scope.set_tag("parent_id", str(parent_id))
        scope.set_extra("key", key)
        scope.set_extra("error", error)
        scope.set_level("error")

        sentry_sdk.capture_message(
            f"Stock cache write failed for product {parent_id}",
            "error"
        )
