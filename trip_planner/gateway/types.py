"""Core types and DTOs for the OpenRouter gateway."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from trip_planner.gateway.errors import GatewayError, ResponseParsingError

if TYPE_CHECKING:
    from trip_planner.core.config import Settings

DEFAULT_API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "perplexity/sonar-pro-search"  # Perplexity models search the web natively
DEFAULT_TIMEOUT = 60
DEFAULT_MAX_RETRIES = 3
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 32000  # Generous: schema-constrained plans with search results are long

SCHEMA_NAME = "response_schema"
WEB_PLUGIN = {"id": "web", "max_results": 5}


# ---------------------------------------------------------------------------
# Gateway config
# ---------------------------------------------------------------------------


@dataclass
class GatewayConfig:
    """Connection and retry configuration for the OpenRouter gateway.

    Configure once at start-up and share. Reads from many threads are fine;
    writes after traffic has started are not synchronised.
    """

    api_key: str | None = None
    timeout: float = DEFAULT_TIMEOUT  # Seconds, applied to connect and read
    max_retries: int = DEFAULT_MAX_RETRIES  # Retries after the first attempt
    api_url: str = DEFAULT_API_URL
    default_model: str = DEFAULT_MODEL
    logger: logging.Logger | None = None

    def is_valid(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_settings(cls, settings: Settings) -> GatewayConfig:
        return cls(
            api_key=settings.openrouter_api_key or None,
            timeout=settings.openrouter_timeout,
            max_retries=settings.openrouter_max_retries,
            api_url=settings.openrouter_api_url,
            default_model=settings.openrouter_default_model,
        )


# ---------------------------------------------------------------------------
# Completion request: the wire payload
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompletionRequest:
    """A single schema-constrained chat completion request."""

    model: str
    messages: tuple[dict[str, str], ...]
    schema: dict[str, Any]
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS

    @property
    def web_search_enabled(self) -> bool:
        """Whether the web plugin must be requested explicitly.

        ``:online`` variants and Perplexity models already search the web.
        """
        return not (self.model.endswith(":online") or "perplexity" in self.model)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [dict(m) for m in self.messages],
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": SCHEMA_NAME,
                    "strict": True,
                    "schema": self.schema,
                },
            },
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if self.web_search_enabled:
            payload["plugins"] = [dict(WEB_PLUGIN)]
        return payload


# ---------------------------------------------------------------------------
# Gateway response: the envelope returned by every call
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TokenUsage:
    total_tokens: int | None = None
    prompt_tokens: int | None = None
    completion_tokens: int | None = None

    @classmethod
    def from_dict(cls, usage: dict[str, Any] | None) -> TokenUsage:
        usage = usage or {}
        return cls(
            total_tokens=usage.get("total_tokens"),
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
        )


@dataclass
class GatewayResponse:
    """Success/failure envelope for one logical completion call.

    A successful response carries ``content``, ``usage`` and ``raw_response``;
    a failed one carries only ``error``. Use the ``succeeded``/``failed``
    factories rather than the constructor.
    """

    success: bool
    content: str | None = None
    usage: dict[str, Any] = field(default_factory=dict)
    raw_response: dict[str, Any] | None = None
    error: GatewayError | None = None

    @classmethod
    def succeeded(
        cls,
        content: str,
        usage: dict[str, Any],
        raw_response: dict[str, Any],
    ) -> GatewayResponse:
        return cls(success=True, content=content, usage=usage, raw_response=raw_response)

    @classmethod
    def failed(cls, error: GatewayError) -> GatewayResponse:
        return cls(success=False, error=error)

    @property
    def failure(self) -> bool:
        return not self.success

    @property
    def retryable(self) -> bool:
        """True when the call failed with an error an outer caller may re-run."""
        return self.error is not None and self.error.retryable

    @property
    def token_usage(self) -> TokenUsage:
        return TokenUsage.from_dict(self.usage)

    @property
    def total_tokens(self) -> int | None:
        return self.token_usage.total_tokens

    @property
    def prompt_tokens(self) -> int | None:
        return self.token_usage.prompt_tokens

    @property
    def completion_tokens(self) -> int | None:
        return self.token_usage.completion_tokens

    def content_as_json(self) -> Any:
        """Decode ``content`` as JSON; None when there is no content."""
        if self.content is None:
            return None
        try:
            return json.loads(self.content)
        except json.JSONDecodeError as e:
            raise ResponseParsingError(f"Failed to parse response content: {e}") from e

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dict for logs/storage."""
        return {
            "success": self.success,
            "content": self.content,
            "total_tokens": self.total_tokens,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "error": self.error.to_dict() if self.error else None,
        }
