"""Failover Orchestrator: main entry point of the gateway.

Handles one chat request end to end:
  1. Admission check against the RateLimiter
  2. Message validation
  3. Eligible providers from the ProviderRegistry, in priority order
  4. Sequential attempts via the matching ProviderAdapter; the first
     response longer than the quality floor wins
  5. Uniform ChatResult, or AggregateFailure once every provider failed

Providers are never called in parallel and a failed provider is not
retried within the same request.

Usage:
    orchestrator = FailoverOrchestrator(registry, RateLimiter())
    result = await orchestrator.handle(ChatRequest(message="Hi"), client_id="10.0.0.1")
"""

from __future__ import annotations

import logging
import time

from relay.core.metrics import PROVIDER_ATTEMPTS, PROVIDER_LATENCY, RATE_LIMITED
from relay.gateway.adapters import BaseProviderAdapter, get_adapter
from relay.gateway.errors import (
    AdmissionError,
    AggregateFailure,
    ConfigurationError,
    ProviderError,
    ValidationError,
)
from relay.gateway.rate_limiter import RateLimiter
from relay.gateway.registry import ProviderRegistry
from relay.gateway.types import (
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    HISTORY_WINDOW,
    MAX_MESSAGE_LENGTH,
    MIN_RESPONSE_LENGTH,
    SYSTEM_PROMPT,
    CapabilityType,
    ChatRequest,
    ChatResult,
    ConversationTurn,
    Provider,
    ProviderFailure,
)

logger = logging.getLogger(__name__)

BELOW_THRESHOLD = "below_threshold"
UNEXPECTED = "unexpected"


class FailoverOrchestrator:
    """Priority-ordered provider failover.

    Owns no per-request state; the registry and rate limiter are shared
    collaborators injected at construction.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        rate_limiter: RateLimiter,
        adapters: dict[CapabilityType, BaseProviderAdapter] | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        history_window: int = HISTORY_WINDOW,
        max_message_length: int = MAX_MESSAGE_LENGTH,
        min_response_length: int = MIN_RESPONSE_LENGTH,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        self.registry = registry
        self.rate_limiter = rate_limiter
        self.adapters = adapters or {
            capability: get_adapter(capability, timeout=timeout, user_agent=user_agent)
            for capability in CapabilityType
        }
        self.history_window = history_window
        self.max_message_length = max_message_length
        self.min_response_length = min_response_length
        self.system_prompt = system_prompt

    async def handle(self, request: ChatRequest, client_id: str) -> ChatResult:
        """Run one chat request through admission, validation and failover.

        Raises:
            AdmissionError: client exceeded the rate limit
            ValidationError: message missing, not a string, blank or too long
            ConfigurationError: no provider has a usable credential
            AggregateFailure: every eligible provider failed
        """
        start = time.monotonic()

        if not await self.rate_limiter.admit(client_id):
            RATE_LIMITED.inc()
            logger.warning("Rate limit exceeded for %s", client_id, extra={"client_ip": client_id})
            raise AdmissionError()

        message = self.validate_message(request.message)

        providers = self.registry.eligible_providers_sorted_by_priority()
        if not providers:
            logger.error("No API providers configured, rejecting chat request")
            raise ConfigurationError()

        logger.info("Processing: %r", _preview(message), extra={"client_ip": client_id})
        messages = self.build_messages(message, request.history)

        failures: list[ProviderFailure] = []
        for provider in providers:
            logger.info("Trying %s...", provider.name, extra={"provider": provider.name})
            failure = None
            try:
                text = await self._attempt(provider, messages)
            except ProviderError as e:
                failure = ProviderFailure(provider=provider.name, message=e.message, error_code=e.error_code)
            except Exception as e:
                logger.exception("Unexpected error from %s", provider.name, extra={"provider": provider.name})
                failure = ProviderFailure(
                    provider=provider.name,
                    message=f"{type(e).__name__} in {provider.name} adapter",
                    error_code=UNEXPECTED,
                )
            else:
                if self.is_acceptable(text):
                    PROVIDER_ATTEMPTS.labels(provider=provider.name, outcome="success").inc()
                    logger.info(
                        "Success with %s (%d chars)", provider.name, len(text), extra={"provider": provider.name}
                    )
                    return ChatResult(
                        response=text,
                        provider=provider.name,
                        model=provider.model or "Unknown",
                        processing_time_ms=int((time.monotonic() - start) * 1000),
                    )
                failure = ProviderFailure(
                    provider=provider.name,
                    message=f"Response from {provider.name} too short ({len(text)} chars)",
                    error_code=BELOW_THRESHOLD,
                )

            PROVIDER_ATTEMPTS.labels(provider=provider.name, outcome=failure.error_code).inc()
            logger.warning(
                "%s failed [%s]: %s",
                provider.name,
                failure.error_code,
                failure.message,
                extra={"provider": provider.name},
            )
            failures.append(failure)

        logger.error(
            "All %d providers failed: %s",
            len(failures),
            "; ".join(f"{f.provider}={f.error_code}" for f in failures),
        )
        raise AggregateFailure(failures)

    async def _attempt(self, provider: Provider, messages: list[dict[str, str]]) -> str:
        adapter = self.adapters[provider.capability]
        started = time.perf_counter()
        try:
            return await adapter.generate(provider, messages)
        finally:
            PROVIDER_LATENCY.labels(provider=provider.name).observe(time.perf_counter() - started)

    def validate_message(self, message: object) -> str:
        """Return the message if usable, else raise ValidationError."""
        if not isinstance(message, str) or not message.strip():
            raise ValidationError("Please provide a valid message string", error="Message is required")
        if len(message) > self.max_message_length:
            raise ValidationError(
                f"Please keep messages under {self.max_message_length:,} characters",
                error="Message too long",
            )
        return message

    def is_acceptable(self, text: str | None) -> bool:
        """Quality floor: non-blank and strictly longer than the minimum."""
        return bool(text and text.strip()) and len(text) > self.min_response_length

    def build_messages(self, message: str, history: list[ConversationTurn]) -> list[dict[str, str]]:
        """System prompt + last ``history_window`` turns + the current message."""
        recent = history[-self.history_window :] if self.history_window > 0 else []
        return [
            {"role": "system", "content": self.system_prompt},
            *(turn.to_message() for turn in recent),
            {"role": "user", "content": message},
        ]


def _preview(text: str, limit: int = 100) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
