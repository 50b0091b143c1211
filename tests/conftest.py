from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from relay.core.config import settings

# Override settings for tests
settings.app_env = "development"
settings.sentry_dsn = ""

from helpers import StubAdapter, make_orchestrator, make_provider  # noqa: E402
from relay.core.dependencies import get_orchestrator, get_rate_limiter, get_registry  # noqa: E402
from relay.gateway.orchestrator import FailoverOrchestrator  # noqa: E402
from relay.gateway.types import Provider  # noqa: E402
from relay.main import app  # noqa: E402


@pytest.fixture
def stub_adapter() -> StubAdapter:
    return StubAdapter()


@pytest.fixture
def two_providers() -> list[Provider]:
    return [
        make_provider("Primary", priority=1),
        make_provider("Secondary", priority=2),
    ]


@pytest.fixture
def orchestrator(two_providers, stub_adapter) -> FailoverOrchestrator:
    return make_orchestrator(two_providers, stub_adapter)


@pytest.fixture
async def client(orchestrator: FailoverOrchestrator) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_registry] = lambda: orchestrator.registry
    app.dependency_overrides[get_rate_limiter] = lambda: orchestrator.rate_limiter
    # Unhandled errors must come back as 500 responses, not be re-raised into the test
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
