"""Prometheus metrics for the application."""

import time

from prometheus_client import Counter, Histogram, Info, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# --- Metrics ---

APP_INFO = Info("relay", "JARVIS relay application info")
APP_INFO.info({"version": "2.0.0", "name": "jarvis_relay"})

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30, 60],
)

PROVIDER_ATTEMPTS = Counter(
    "provider_attempts_total",
    "Upstream provider attempts by outcome",
    ["provider", "outcome"],
)

PROVIDER_LATENCY = Histogram(
    "provider_request_duration_seconds",
    "Upstream provider call duration in seconds",
    ["provider"],
    buckets=[0.1, 0.25, 0.5, 1, 2.5, 5, 10, 20, 30],
)

RATE_LIMITED = Counter(
    "rate_limited_requests_total",
    "Chat requests rejected by admission control",
)


# --- Middleware ---

# Only known routes get their own label; anything else is bucketed
_KNOWN_PATHS = ("/api/chat", "/health", "/metrics")


def _normalize_path(path: str) -> str:
    """Collapse unknown paths to avoid high label cardinality."""
    return path if path in _KNOWN_PATHS else "other"


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Collect HTTP request metrics for Prometheus."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        path = _normalize_path(request.url.path)

        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start

        REQUEST_COUNT.labels(method=method, path=path, status=response.status_code).inc()
        REQUEST_DURATION.labels(method=method, path=path).observe(duration)

        return response


def metrics_response() -> Response:
    """Generate Prometheus /metrics response."""
    return Response(
        content=generate_latest(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
