from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from relay.core.config import settings
from relay.core.dependencies import get_rate_limiter, get_registry
from relay.core.metrics import metrics_response
from relay.gateway.rate_limiter import RateLimiter
from relay.gateway.registry import ProviderRegistry
from relay.schemas.chat import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(
    registry: ProviderRegistry = Depends(get_registry),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
):
    return HealthResponse(
        status="JARVIS Backend Online",
        timestamp=datetime.now(timezone.utc),
        version=settings.app_version,
        environment=settings.app_env,
        apis_configured=registry.eligible_count(),
        apis_total=registry.total_count,
        keys_valid=not registry.missing_credentials(),
        rate_limit=rate_limiter.get_stats(),
    )


@router.get("/metrics", include_in_schema=False)
async def metrics():
    return metrics_response()
