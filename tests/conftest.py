from collections.abc import Callable

import httpx
import pytest

from trip_planner.core.config import settings
from trip_planner.gateway.configuration import reset_config
from trip_planner.gateway.gateway import OpenRouterClient

API_URL = "https://openrouter.ai/api/v1/chat/completions"
TEST_API_KEY = "test-api-key"

Outcome = Callable[[httpx.Request], httpx.Response]


def completion_body(content: str | None = '{"response": "ok"}', usage: dict | None = None) -> dict:
    """Minimal OpenRouter chat completion body."""
    message = {} if content is None else {"content": content}
    return {
        "id": "gen-123",
        "model": "perplexity/sonar-pro-search",
        "choices": [{"message": message, "finish_reason": "stop"}],
        "usage": usage if usage is not None else {"total_tokens": 100, "prompt_tokens": 60, "completion_tokens": 40},
    }


def reply(
    status_code: int = 200,
    *,
    json: dict | None = None,
    text: str | None = None,
    headers: dict[str, str] | None = None,
) -> Outcome:
    def _build(request: httpx.Request) -> httpx.Response:
        if text is not None:
            return httpx.Response(status_code, text=text, headers=headers)
        if json is not None:
            return httpx.Response(status_code, json=json, headers=headers)
        return httpx.Response(status_code, headers=headers)

    return _build


def ok(content: str = '{"response": "ok"}', usage: dict | None = None) -> Outcome:
    return reply(200, json=completion_body(content, usage))


def fail(exc_cls: type[Exception], message: str = "boom") -> Outcome:
    def _raise(request: httpx.Request) -> httpx.Response:
        if issubclass(exc_cls, httpx.RequestError):
            raise exc_cls(message, request=request)
        raise exc_cls(message)

    return _raise


class ScriptedTransport(httpx.MockTransport):
    """Plays outcomes in order; the last one repeats for any further request."""

    def __init__(self, *outcomes: Outcome):
        self.outcomes = list(outcomes)
        self.requests: list[httpx.Request] = []
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        return outcome(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Fresh process-wide config and no key leaking in from the environment."""
    monkeypatch.setattr(settings, "openrouter_api_key", "")
    reset_config()
    yield
    reset_config()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def strict_sleeps(sleeps):
    """Sleep stand-in that rejects negative durations like time.sleep does."""

    def _sleep(seconds: float) -> None:
        if seconds < 0:
            raise ValueError("sleep length must be non-negative")
        sleeps.append(seconds)

    return _sleep


@pytest.fixture
def make_client(sleeps):
    """Build an OpenRouterClient wired to a ScriptedTransport."""

    def _make(*outcomes: Outcome, **kwargs) -> tuple[OpenRouterClient, ScriptedTransport]:
        transport = ScriptedTransport(*outcomes)
        kwargs.setdefault("api_key", TEST_API_KEY)
        kwargs.setdefault("sleep", sleeps.append)
        client = OpenRouterClient(
            http_client=httpx.Client(transport=transport),
            **kwargs,
        )
        return client, transport

    return _make
