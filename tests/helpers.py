"""Shared test doubles for the gateway and API tests."""

from __future__ import annotations

from contextlib import contextmanager
from unittest.mock import AsyncMock, patch

import httpx

from relay.gateway.adapters import BaseProviderAdapter
from relay.gateway.orchestrator import FailoverOrchestrator
from relay.gateway.rate_limiter import RateLimiter
from relay.gateway.registry import ProviderRegistry
from relay.gateway.types import CapabilityType, Provider

VALID_KEY = "sk-test-0123456789abcdef"


class StubAdapter(BaseProviderAdapter):
    """Adapter returning scripted outcomes per provider name.

    An outcome is either the response text or an exception to raise.
    Every call is recorded so tests can assert which providers were hit.
    """

    capability = CapabilityType.CHAT_COMPLETION

    def __init__(self, outcomes: dict[str, str | BaseException] | None = None):
        super().__init__()
        self.outcomes = outcomes or {}
        self.calls: list[tuple[str, list[dict[str, str]]]] = []

    def build_payload(self, provider, messages):
        return {"messages": messages}

    async def generate(self, provider, messages):
        self.calls.append((provider.name, messages))
        outcome = self.outcomes.get(provider.name, "Default answer from the stub adapter.")
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def called_providers(self) -> list[str]:
        return [name for name, _ in self.calls]


def make_provider(
    name: str = "Primary",
    priority: int = 1,
    api_key: str = VALID_KEY,
    capability: CapabilityType = CapabilityType.CHAT_COMPLETION,
    model: str | None = "test-model",
    **kwargs,
) -> Provider:
    return Provider(
        name=name,
        url=f"https://{name.lower()}.example.com/v1/chat/completions",
        api_key=api_key,
        capability=capability,
        priority=priority,
        model=model,
        **kwargs,
    )


def make_orchestrator(
    providers: list[Provider],
    adapter: BaseProviderAdapter | None = None,
    limiter: RateLimiter | None = None,
) -> FailoverOrchestrator:
    adapter = adapter or StubAdapter()
    return FailoverOrchestrator(
        registry=ProviderRegistry(providers),
        rate_limiter=limiter or RateLimiter(),
        adapters={capability: adapter for capability in CapabilityType},
    )


def make_httpx_response(status_code: int, json_data=None, text: str = "") -> httpx.Response:
    """Create a proper httpx.Response with request set."""
    request = httpx.Request("POST", "https://example.com")
    if json_data is not None:
        return httpx.Response(status_code, json=json_data, request=request)
    return httpx.Response(status_code, text=text, request=request)


def chat_completion_body(text: str = "Hello there, how can I help?") -> dict:
    return {
        "choices": [{"message": {"role": "assistant", "content": text}, "finish_reason": "stop"}],
        "model": "test-model",
        "usage": {"prompt_tokens": 10, "completion_tokens": 20},
    }


@contextmanager
def mock_http(*responses):
    """Patch httpx.AsyncClient; each POST returns (or raises) the next item."""
    with patch("relay.gateway.adapters.httpx.AsyncClient") as mock_client_cls:
        mock_client = AsyncMock()
        mock_client.post.side_effect = list(responses)
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=None)
        mock_client_cls.return_value = mock_client
        mock_client.client_cls = mock_client_cls
        yield mock_client
