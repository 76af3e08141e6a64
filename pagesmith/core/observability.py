"""
Logfire observability configuration for Pagesmith.

Traces landing page generation, persistence and publishing.

Usage:
    from pagesmith.core.observability import setup_logfire
    setup_logfire()

    import logfire
    with logfire.span("generate_landing_page", title=title):
        ...

Environment Variables:
    LOGFIRE_TOKEN: Logfire write token (required to send data)
    LOGFIRE_ENVIRONMENT: Environment name (development, staging, production)
"""

import os
import logging
from typing import Optional

import logfire

logger = logging.getLogger(__name__)

_logfire_configured = False


def setup_logfire(
    environment: Optional[str] = None,
    service_name: str = "pagesmith"
) -> bool:
    """
    Configure Logfire for observability.

    Args:
        environment: Environment name (or LOGFIRE_ENVIRONMENT env var)
        service_name: Service name for tracing

    Returns:
        True if Logfire was configured, False if skipped (no token)
    """
    global _logfire_configured

    if _logfire_configured:
        logger.debug("Logfire already configured")
        return True

    token = os.environ.get("LOGFIRE_TOKEN")
    if not token:
        logger.info("LOGFIRE_TOKEN not set, skipping Logfire configuration")
        return False

    env = environment or os.environ.get("LOGFIRE_ENVIRONMENT", "development")

    try:
        logfire.configure(
            token=token,
            service_name=service_name,
            environment=env,
            send_to_logfire=True,
        )

        # Validation tracing for the document models
        logfire.instrument_pydantic()

        _logfire_configured = True
        logger.info(f"Logfire configured: service={service_name}, environment={env}")
        return True

    except Exception as e:
        logger.error(f"Failed to configure Logfire: {e}")
        return False
