"""Provider Registry: static, priority-ordered list of upstream providers.

The list is built once at startup from configuration and never mutated.
Selection filters out providers without a usable credential and sorts the
rest by ascending priority (stable, so ties keep configuration order).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from relay.gateway.types import CapabilityType, Provider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Read-only view over the configured providers.

    Usage:
        registry = ProviderRegistry.from_settings(settings)
        for provider in registry.eligible_providers_sorted_by_priority():
            ...
    """

    def __init__(self, providers: Iterable[Provider]):
        self._providers: tuple[Provider, ...] = tuple(providers)

    @property
    def providers(self) -> tuple[Provider, ...]:
        return self._providers

    @property
    def total_count(self) -> int:
        return len(self._providers)

    def eligible_providers_sorted_by_priority(self) -> list[Provider]:
        """Providers with a valid credential, lowest priority value first.

        An empty list is not an error here; the orchestrator turns it into
        a configuration failure.
        """
        eligible = [p for p in self._providers if p.has_valid_credential]
        return sorted(eligible, key=lambda p: p.priority)

    def eligible_count(self) -> int:
        """How many providers are currently usable (for /health)."""
        return sum(1 for p in self._providers if p.has_valid_credential)

    def missing_credentials(self) -> list[str]:
        """Names of providers whose credential is absent, a placeholder or too short."""
        return [p.name for p in self._providers if not p.has_valid_credential]

    def log_summary(self) -> None:
        """Log configured/eligible providers. Never logs credentials."""
        logger.info("APIs configured: %d/%d", self.eligible_count(), self.total_count)
        missing = self.missing_credentials()
        if missing:
            logger.warning("Missing or invalid API keys for: %s", ", ".join(missing))

    @classmethod
    def from_settings(cls, settings) -> ProviderRegistry:
        """Build the default provider table from environment credentials."""
        return cls(default_providers(settings))


def default_providers(settings) -> list[Provider]:
    """Default provider table, in configuration order."""
    return [
        Provider(
            name="Groq-Ultra-Fast",
            url="https://api.groq.com/openai/v1/chat/completions",
            api_key=settings.groq_api_key,
            model="mixtral-8x7b-32768",
            capability=CapabilityType.CHAT_COMPLETION,
            priority=1,
            max_tokens=2000,
            description="Ultra-fast Mixtral responses",
        ),
        Provider(
            name="DeepSeek-Intelligence",
            url="https://api.deepseek.com/v1/chat/completions",
            api_key=settings.deepseek_api_key,
            model="deepseek-chat",
            capability=CapabilityType.CHAT_COMPLETION,
            priority=2,
            max_tokens=2000,
            description="Advanced reasoning AI",
        ),
        Provider(
            name="Together-AI-Llama",
            url="https://api.together.xyz/v1/chat/completions",
            api_key=settings.together_api_key,
            model="meta-llama/Meta-Llama-3.1-8B-Instruct-Turbo",
            capability=CapabilityType.CHAT_COMPLETION,
            priority=3,
            max_tokens=2000,
            description="Latest Llama 3.1 model",
        ),
        Provider(
            name="HuggingFace-Backup",
            url="https://api-inference.huggingface.co/models/microsoft/DialoGPT-large",
            api_key=settings.huggingface_api_key,
            capability=CapabilityType.GENERIC_TEXT,
            priority=4,
            description="Reliable HuggingFace backup",
        ),
        Provider(
            name="OpenRouter-Fallback",
            url="https://openrouter.ai/api/v1/chat/completions",
            api_key=settings.openrouter_api_key,
            model="meta-llama/llama-3.1-8b-instruct",
            capability=CapabilityType.CHAT_COMPLETION,
            priority=5,
            max_tokens=2000,
            description="OpenRouter multi-model fallback",
            extra_headers={
                "HTTP-Referer": settings.frontend_url,
                "X-Title": "JARVIS AI Educational Assistant",
            },
        ),
    ]
