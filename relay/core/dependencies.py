"""Process-wide gateway components, exposed as FastAPI dependencies.

Each component is built once on first use and shared by every request.
Tests replace them through ``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Request

from relay.core.config import settings
from relay.gateway.orchestrator import FailoverOrchestrator
from relay.gateway.rate_limiter import RateLimiter
from relay.gateway.registry import ProviderRegistry


@lru_cache(maxsize=1)
def get_registry() -> ProviderRegistry:
    return ProviderRegistry.from_settings(settings)


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    return RateLimiter(
        limit=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )


@lru_cache(maxsize=1)
def get_orchestrator() -> FailoverOrchestrator:
    return FailoverOrchestrator(
        registry=get_registry(),
        rate_limiter=get_rate_limiter(),
        timeout=settings.upstream_timeout_seconds,
        user_agent=settings.user_agent,
        history_window=settings.history_window,
        max_message_length=settings.max_message_length,
        min_response_length=settings.min_response_length,
    )


def get_client_ip(request: Request) -> str:
    """Client identity for admission control: the peer network address."""
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
