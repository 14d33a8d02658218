"""Error taxonomy for the OpenRouter gateway.

Every failure the gateway can report is one of the subclasses below. The
``retryable`` flag is fixed per class; the retry orchestrator relies on it and
callers read it to decide whether an outer re-run makes sense.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for all gateway errors."""

    kind: str = "gateway"
    retryable: bool = False
    default_message: str = ""

    def __init__(self, message: str | None = None):
        self.message = message if message is not None else self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "error": type(self).__name__,
            "message": self.message,
            "retryable": self.retryable,
        }


class AuthenticationError(GatewayError):
    """HTTP 401: the API key was rejected."""

    kind = "authentication"
    retryable = False
    default_message = "Invalid API key"


class RateLimitError(GatewayError):
    """HTTP 429. ``retry_after`` holds the server's Retry-After seconds, if sent."""

    kind = "rate_limit"
    retryable = True
    default_message = "Rate limit exceeded"

    def __init__(self, message: str | None = None, retry_after: int | None = None):
        super().__init__(message)
        self.retry_after = retry_after

    def to_dict(self) -> dict:
        return {**super().to_dict(), "retry_after": self.retry_after}


class ServerError(GatewayError):
    """HTTP 5xx."""

    kind = "server"
    retryable = True
    default_message = "Server error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    def to_dict(self) -> dict:
        return {**super().to_dict(), "status_code": self.status_code}


class RequestTimeoutError(GatewayError):
    """Connect or read timeout."""

    kind = "timeout"
    retryable = True
    default_message = "Request timeout"


class NetworkError(GatewayError):
    """DNS failure, refused connection or any other transport breakage."""

    kind = "network"
    retryable = True
    default_message = "Network connection failed"


class ResponseParsingError(GatewayError):
    """Malformed JSON or a body without the expected completion content."""

    kind = "response_parsing"
    retryable = False
    default_message = "Invalid JSON response"


class ClientError(GatewayError):
    """Any 4xx other than 401 and 429."""

    kind = "client"
    retryable = False
    default_message = "Client error"

    def __init__(self, message: str | None = None, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code

    def to_dict(self) -> dict:
        return {**super().to_dict(), "status_code": self.status_code}


class ConfigurationError(GatewayError):
    """Missing or invalid configuration, raised before any request is sent."""

    kind = "configuration"
    retryable = False
    default_message = "Invalid configuration"


# Errors the orchestrator retries with backoff once the attempt budget allows.
TRANSIENT_ERRORS: tuple[type[GatewayError], ...] = (ServerError, RequestTimeoutError, NetworkError)

ALL_ERRORS: tuple[type[GatewayError], ...] = (
    AuthenticationError,
    RateLimitError,
    ServerError,
    RequestTimeoutError,
    NetworkError,
    ResponseParsingError,
    ClientError,
    ConfigurationError,
)
