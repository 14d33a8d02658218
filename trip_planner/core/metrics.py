"""Prometheus metrics for the OpenRouter gateway."""

from prometheus_client import Counter, Histogram, generate_latest

GATEWAY_ATTEMPTS = Counter(
    "openrouter_attempts_total",
    "HTTP attempts sent to OpenRouter",
    ["model"],
)

GATEWAY_RETRIES = Counter(
    "openrouter_retries_total",
    "Retries scheduled after a failed attempt",
    ["error_kind"],
)

GATEWAY_RESULTS = Counter(
    "openrouter_results_total",
    "Final outcome of logical completion calls",
    ["outcome", "error_kind"],
)

GATEWAY_REQUEST_DURATION = Histogram(
    "openrouter_request_duration_seconds",
    "Duration of a single OpenRouter HTTP attempt",
    buckets=[0.5, 1, 2.5, 5, 10, 30, 60, 120],
)


def record_result(success: bool, error_kind: str = "") -> None:
    outcome = "success" if success else "failure"
    GATEWAY_RESULTS.labels(outcome=outcome, error_kind=error_kind or "none").inc()


def metrics_text() -> bytes:
    """Prometheus exposition payload for scraping or dumping."""
    return generate_latest()
