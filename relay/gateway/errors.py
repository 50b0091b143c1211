"""Error taxonomy for the failover gateway.

Every error that may reach the HTTP boundary carries the status code and
public ``error`` label it is rendered with. ``ProviderError`` is internal:
the orchestrator always converts it into a failover continuation.
"""

from __future__ import annotations

from relay.gateway.types import ProviderFailure


class RelayError(Exception):
    """Base class for errors rendered as ``{error, message}`` bodies."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(self, message: str, error: str | None = None):
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class AdmissionError(RelayError):
    """Client exceeded its request budget for the current window."""

    status_code = 429
    error = "Rate limit exceeded"

    def __init__(self, message: str = "Please wait before making more requests"):
        super().__init__(message)


class ValidationError(RelayError):
    """Malformed chat input. Never retried."""

    status_code = 400
    error = "Invalid request"


class ConfigurationError(RelayError):
    """No provider has a usable credential."""

    status_code = 503
    error = "No API providers configured"

    def __init__(self, message: str = "Server configuration error - please contact administrator"):
        super().__init__(message)


class AggregateFailure(RelayError):
    """Every eligible provider was tried and none produced a usable answer.

    ``failures`` holds the per-provider diagnostics for logging; only the
    provider names are exposed to the caller.
    """

    status_code = 503
    error = "All AI providers are currently unavailable"

    def __init__(
        self,
        failures: list[ProviderFailure],
        message: str = "Please try again in a moment. If the issue persists, contact support.",
    ):
        super().__init__(message)
        self.failures = failures

    @property
    def providers_tried(self) -> list[str]:
        return [f.provider for f in self.failures]

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["providers_tried"] = self.providers_tried
        return body


class ProviderError(Exception):
    """A single upstream provider failed.

    Attributes:
        error_code: failure category (``http_error``, ``timeout``,
            ``transport``, ``invalid_format``, ``upstream_error``)
        status_code: upstream HTTP status, 0 if none was received
    """

    HTTP_ERROR = "http_error"
    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    INVALID_FORMAT = "invalid_format"
    UPSTREAM_ERROR = "upstream_error"

    def __init__(self, message: str, error_code: str = HTTP_ERROR, status_code: int = 0):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
