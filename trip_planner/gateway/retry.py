"""Retry orchestration with exponential backoff.

Backoff strategy:
  delay = min(2^attempt, 32) seconds
  429 responses wait the server's Retry-After instead, when one was sent

Retry rules per error class:
  - RateLimitError: always wait and retry while attempts remain
  - ServerError / RequestTimeoutError / NetworkError: wait and retry while
    attempt < max_retries, otherwise give up with that error
  - any other GatewayError (including ResponseParsingError): fail immediately

This is the only place where a GatewayError becomes a failed GatewayResponse.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from trip_planner.core.metrics import GATEWAY_RETRIES, record_result
from trip_planner.gateway.errors import TRANSIENT_ERRORS, GatewayError, RateLimitError, ServerError
from trip_planner.gateway.types import DEFAULT_MAX_RETRIES, GatewayResponse

MAX_BACKOFF_SECONDS = 32


def calculate_backoff(attempt: int) -> int:
    """Seconds to wait after the given (0-based) failed attempt."""
    return min(2**attempt, MAX_BACKOFF_SECONDS)


class RetryOrchestrator:
    """Runs a single-attempt callable inside a bounded retry loop.

    Usage:
        orchestrator = RetryOrchestrator(max_retries=3)
        response = orchestrator.run(lambda: adapter.send(payload))

    The call blocks for the whole loop, sleeps included.
    """

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        sleep: Callable[[float], None] = time.sleep,
        logger: logging.Logger | None = None,
    ):
        self.max_retries = max_retries
        self._sleep = sleep
        self._logger = logger or logging.getLogger(__name__)

    def run(self, call: Callable[[], GatewayResponse]) -> GatewayResponse:
        attempt = 0
        calls_made = 0
        last_error: GatewayError | None = None

        while attempt <= self.max_retries:
            calls_made += 1
            try:
                response = call()
            except RateLimitError as e:
                last_error = e
                wait_time = max(0, e.retry_after) if e.retry_after is not None else calculate_backoff(attempt)
                self._wait(attempt, e, wait_time)
                attempt += 1
            except TRANSIENT_ERRORS as e:
                last_error = e
                if attempt >= self.max_retries:
                    break
                self._wait(attempt, e, calculate_backoff(attempt))
                attempt += 1
            except GatewayError as e:
                record_result(False, e.kind)
                return GatewayResponse.failed(e)
            else:
                record_result(True)
                return response

        error = last_error or ServerError("Unknown error")
        self._logger.error(
            "OpenRouter request gave up after %d attempt(s): %s - %s",
            calls_made,
            type(error).__name__,
            error.message,
        )
        record_result(False, error.kind)
        return GatewayResponse.failed(error)

    def _wait(self, attempt: int, error: GatewayError, wait_time: float) -> None:
        self._logger.warning(
            "OpenRouter request failed (attempt %d/%d): %s - %s. Retrying in %ss...",
            attempt + 1,
            self.max_retries + 1,
            type(error).__name__,
            error.message,
            wait_time,
            extra={"attempt": attempt + 1, "error_kind": error.kind, "wait_seconds": wait_time},
        )
        GATEWAY_RETRIES.labels(error_kind=error.kind).inc()
        self._sleep(wait_time)
