"""OpenRouter client: entry point used by plan generation.

Integrates:
  - GatewayConfig: key, endpoint, timeout and retry budget
  - OpenRouterAdapter: payload construction and a single HTTP round trip
  - RetryOrchestrator: backoff and rate-limit-aware retries

Usage:
    client = OpenRouterClient(api_key="sk-or-...")
    response = client.chat_completion_with_schema(messages=messages, schema=schema)
    if response.success:
        plan = response.content_as_json()
    elif response.error.retryable:
        ...  # caller may re-enqueue the whole job
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import httpx

from trip_planner.core.logging import get_gateway_logger
from trip_planner.gateway.adapter import OpenRouterAdapter
from trip_planner.gateway.configuration import configure, get_config
from trip_planner.gateway.errors import ConfigurationError, GatewayError
from trip_planner.gateway.retry import RetryOrchestrator
from trip_planner.gateway.types import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    GatewayConfig,
    GatewayResponse,
)

HEALTH_CHECK_MESSAGES = [{"role": "user", "content": "Hello"}]
HEALTH_CHECK_SCHEMA = {"type": "object", "properties": {"response": {"type": "string"}}}


class OpenRouterClient:
    """Schema-constrained chat completions against OpenRouter with retries."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        config: GatewayConfig | None = None,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            api_key: Overrides the configured key
            timeout: Per-request connect/read timeout in seconds
            max_retries: Retries after the first attempt
            config: Explicit config; the process-wide one is used otherwise
            http_client: Pre-built httpx.Client (tests, connection sharing)
            sleep: Backoff sleep function
        """
        if config is None:
            config = get_config()
            if not (api_key or config.api_key):
                self._load_key_from_settings()

        self.config = config
        self._api_key = api_key or config.api_key or ""
        self._timeout = timeout if timeout is not None else config.timeout
        self._max_retries = max_retries if max_retries is not None else config.max_retries

        if not self._api_key:
            raise ConfigurationError("API key is required")

        self._logger = config.logger or get_gateway_logger()
        self.adapter = OpenRouterAdapter(
            api_key=self._api_key,
            api_url=config.api_url,
            timeout=self._timeout,
            http_client=http_client,
        )
        self.orchestrator = RetryOrchestrator(
            max_retries=self._max_retries,
            sleep=sleep,
            logger=self._logger,
        )

    @staticmethod
    def _load_key_from_settings() -> None:
        from trip_planner.core.config import settings

        if settings.openrouter_api_key:
            configure(api_key=settings.openrouter_api_key)

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def max_retries(self) -> int:
        return self._max_retries

    @property
    def api_url(self) -> str:
        return self.adapter.api_url

    def chat_completion_with_schema(
        self,
        messages: list[dict[str, str]],
        schema: dict[str, Any],
        model: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> GatewayResponse:
        """Request a completion whose content must match ``schema``.

        Blocks until the call succeeds or the retry budget runs out. Never
        raises GatewayError; failures come back in the envelope.
        """
        payload = self.adapter.build_payload(
            model=model or self.config.default_model,
            messages=messages,
            schema=schema,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return self.orchestrator.run(lambda: self.adapter.send(payload))

    def test_connection(self) -> bool:
        """True if a minimal round trip succeeds. Never raises."""
        try:
            response = self.chat_completion_with_schema(
                messages=HEALTH_CHECK_MESSAGES,
                schema=HEALTH_CHECK_SCHEMA,
            )
        except GatewayError:
            return False
        return response.success

    def close(self) -> None:
        self.adapter.close()

    def __enter__(self) -> OpenRouterClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
