"""OpenRouter adapter: one HTTP round trip per call.

Translates a CompletionRequest into OpenRouter's chat completions protocol,
sends it, and turns the HTTP outcome into a GatewayResponse or a typed
GatewayError. The adapter never retries and never returns errors as data;
that is the orchestrator's job.

Status mapping:
  - 2xx: parse choices[0].message.content and usage
  - 401: AuthenticationError
  - 429: RateLimitError (Retry-After honoured)
  - 400: ClientError, message taken from the error body when decodable
  - 5xx: ServerError
  - other: ClientError with that status
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import httpx

from trip_planner.core.metrics import GATEWAY_ATTEMPTS, GATEWAY_REQUEST_DURATION
from trip_planner.gateway.errors import (
    AuthenticationError,
    ClientError,
    GatewayError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    ResponseParsingError,
    ServerError,
)
from trip_planner.gateway.types import DEFAULT_API_URL, DEFAULT_TIMEOUT, CompletionRequest, GatewayResponse

logger = logging.getLogger(__name__)

_BODY_PREVIEW_CHARS = 1000


class OpenRouterAdapter:
    """Request executor for OpenRouter chat completions with JSON schema output."""

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.Client | None = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=httpx.Timeout(timeout))

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    @staticmethod
    def build_payload(
        model: str,
        messages: list[dict[str, str]],
        schema: dict[str, Any],
        temperature: float,
        max_tokens: int,
    ) -> dict[str, Any]:
        request = CompletionRequest(
            model=model,
            messages=tuple(messages),
            schema=schema,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return request.to_payload()

    def send(self, payload: dict[str, Any]) -> GatewayResponse:
        """POST the payload once. Raises a GatewayError on any failure."""
        GATEWAY_ATTEMPTS.labels(model=payload.get("model", "")).inc()
        start = time.monotonic()

        try:
            resp = self._client.post(
                self.api_url,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=httpx.Timeout(self.timeout),
            )
            return self.parse_response(resp)
        except GatewayError:
            raise
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(f"Request timeout: {e}") from e
        except (httpx.ConnectError, httpx.NetworkError) as e:
            raise NetworkError(f"Network error: {e}") from e
        except Exception as e:
            raise NetworkError(f"Unexpected error: {e}") from e
        finally:
            GATEWAY_REQUEST_DURATION.observe(time.monotonic() - start)

    def parse_response(self, resp: httpx.Response) -> GatewayResponse:
        status = resp.status_code

        if 200 <= status <= 299:
            return self.parse_success_response(resp)

        if status == 401:
            raise AuthenticationError("Invalid API key")

        if status == 429:
            raise RateLimitError("Rate limit exceeded", retry_after=_parse_retry_after(resp))

        if status == 400:
            raise ClientError(f"Client error: {self._bad_request_message(resp)}", status_code=400)

        if 500 <= status <= 599:
            raise ServerError(f"Server error: {resp.reason_phrase}", status_code=status)

        raise ClientError(f"Client error: {resp.reason_phrase}", status_code=status)

    def parse_success_response(self, resp: httpx.Response) -> GatewayResponse:
        body_text = resp.text
        try:
            body = json.loads(body_text)
        except json.JSONDecodeError as e:
            # Most often a truncated body
            logger.error("JSON parse error: %s", e)
            logger.error(
                "Response body preview (first %d chars): %s",
                _BODY_PREVIEW_CHARS,
                body_text[:_BODY_PREVIEW_CHARS] or "No response body",
            )
            logger.error("Response body length: %d", len(body_text))
            raise ResponseParsingError(f"Failed to parse response: {e}") from e

        content = _dig_content(body)
        if content is None:
            raise ResponseParsingError("Missing content in response")

        usage = body.get("usage") if isinstance(body, dict) else None
        if not isinstance(usage, dict):
            usage = {}
        return GatewayResponse.succeeded(
            content=content,
            usage=usage,
            raw_response=body,
        )

    @staticmethod
    def _bad_request_message(resp: httpx.Response) -> str:
        try:
            error_body = resp.json()
        except ValueError:
            return resp.reason_phrase

        logger.error("OpenRouter Bad Request response: %r", error_body)
        if not isinstance(error_body, dict):
            return resp.reason_phrase

        error = error_body.get("error")
        if isinstance(error, dict):
            error = error.get("message")
        return error or error_body.get("message") or resp.reason_phrase


def _dig_content(body: Any) -> str | None:
    """choices[0].message.content, or None if any step is missing."""
    if not isinstance(body, dict):
        return None
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    choice = choices[0]
    if not isinstance(choice, dict):
        return None
    message = choice.get("message")
    if not isinstance(message, dict):
        return None
    return message.get("content")


def _parse_retry_after(resp: httpx.Response) -> int | None:
    value = resp.headers.get("Retry-After")
    if value is None:
        return None
    try:
        seconds = int(value.strip())
    except ValueError:
        # HTTP-date form counts as absent and falls back to exponential backoff,
        # where a plain integer cast would have produced a zero-second wait
        return None
    if seconds < 0:
        return None
    return seconds
