"""
run_connection_check.py: smoke test for the OpenRouter connection.

Loads settings from the environment / .env, sends the minimal health-check
completion and exits 0 when OpenRouter answered successfully, 1 otherwise.
Retries follow OPENROUTER_MAX_RETRIES, so a flaky upstream can make this
take a while.

Usage:
    OPENROUTER_API_KEY=sk-or-... python run_connection_check.py
"""

import logging
import sys
import time

from trip_planner.core.config import validate_settings_for_production
from trip_planner.core.logging import setup_logging
from trip_planner.gateway.configuration import load_from_settings
from trip_planner.gateway.gateway import OpenRouterClient

setup_logging()
logger = logging.getLogger("connection_check")


def main() -> int:
    validate_settings_for_production()
    config = load_from_settings()
    logger.info(
        "Checking %s (model=%s, timeout=%ss, max_retries=%d)",
        config.api_url,
        config.default_model,
        config.timeout,
        config.max_retries,
    )

    start = time.monotonic()
    with OpenRouterClient() as client:
        ok = client.test_connection()
    elapsed = time.monotonic() - start

    if ok:
        logger.info("OpenRouter connection OK (%.1fs)", elapsed)
        return 0
    logger.error("OpenRouter connection FAILED (%.1fs)", elapsed)
    return 1


if __name__ == "__main__":
    sys.exit(main())
