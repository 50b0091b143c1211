"""Provider Adapters: protocol-level handling per capability type.

Each adapter turns the normalized conversation into the provider's HTTP
payload, sends it, and returns the plain response text. Any failure is
raised as ProviderError with a category the orchestrator can log:

  - ChatCompletion: OpenAI-compatible /chat/completions (Groq, DeepSeek,
    Together, OpenRouter)
  - GenericText: HuggingFace-style text-generation inference, only the
    current user message is sent as ``inputs``

Credentials only ever go into the Authorization header. Any upstream text
copied into an error message is scrubbed of the credential first.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from relay.gateway.errors import ProviderError
from relay.gateway.types import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    CapabilityType,
    Provider,
)

logger = logging.getLogger(__name__)

_REDACTED = "***"


def redact(text: str, secret: str) -> str:
    """Remove every occurrence of ``secret`` from ``text``."""
    if secret and secret in text:
        return text.replace(secret, _REDACTED)
    return text


class BaseProviderAdapter(ABC):
    """Base class for all provider adapters."""

    capability: CapabilityType

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.timeout = timeout
        self.user_agent = user_agent

    @abstractmethod
    async def generate(self, provider: Provider, messages: list[dict[str, str]]) -> str:
        """Send the conversation to ``provider`` and return its text.

        Raises:
            ProviderError: transport failure, timeout, non-2xx status or an
                unparseable body.
        """
        ...

    @abstractmethod
    def build_payload(self, provider: Provider, messages: list[dict[str, str]]) -> dict[str, Any]:
        """Provider-specific JSON body for ``messages``."""
        ...

    def _headers(self, provider: Provider) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {provider.api_key}",
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }
        headers.update(provider.extra_headers)
        return headers

    async def _post(self, provider: Provider, payload: dict[str, Any]) -> httpx.Response:
        """POST ``payload`` with auth headers, mapping transport errors to ProviderError."""
        logger.debug("Sending %s request to %s", self.capability.value, provider.name)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await client.post(
                    provider.url,
                    json=payload,
                    headers=self._headers(provider),
                )
        except httpx.TimeoutException as e:
            raise ProviderError(
                f"{provider.name} timeout after {self.timeout}s",
                error_code=ProviderError.TIMEOUT,
            ) from e
        except httpx.HTTPError as e:
            detail = redact(str(e), provider.api_key) or type(e).__name__
            raise ProviderError(
                f"{provider.name} request failed: {detail}",
                error_code=ProviderError.TRANSPORT,
            ) from e


# ---------------------------------------------------------------------------
# Chat-completion adapter (OpenAI-compatible)
# ---------------------------------------------------------------------------


class ChatCompletionAdapter(BaseProviderAdapter):
    """OpenAI-compatible Chat Completions adapter."""

    capability = CapabilityType.CHAT_COMPLETION

    def build_payload(self, provider: Provider, messages: list[dict[str, str]]) -> dict[str, Any]:
        return {
            "model": provider.model,
            "messages": messages,
            "max_tokens": provider.max_tokens or DEFAULT_MAX_TOKENS,
            "temperature": DEFAULT_TEMPERATURE,
            "stream": False,
        }

    async def generate(self, provider: Provider, messages: list[dict[str, str]]) -> str:
        resp = await self._post(provider, self.build_payload(provider, messages))

        if not resp.is_success:
            error_text = redact(self._extract_error_message(resp), provider.api_key)
            raise ProviderError(
                f"{provider.name} API error: {error_text}",
                error_code=ProviderError.HTTP_ERROR,
                status_code=resp.status_code,
            )

        invalid = ProviderError(
            f"Invalid response format from {provider.name}",
            error_code=ProviderError.INVALID_FORMAT,
            status_code=resp.status_code,
        )
        try:
            data = resp.json()
        except ValueError as e:
            raise invalid from e

        content = self._extract_content(data)
        if content is None:
            raise invalid
        return content

    @staticmethod
    def _extract_content(data: Any) -> str | None:
        """First choice's ``message.content``, or None if the shape is wrong."""
        if not isinstance(data, dict):
            return None
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            return None
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            return None
        return content

    @staticmethod
    def _extract_error_message(resp: httpx.Response) -> str:
        """Nested ``error.message`` → top-level message → raw body → status code."""
        try:
            data = resp.json()
        except ValueError:
            data = None

        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if isinstance(error, str) and error:
                return error
            if data.get("message"):
                return str(data["message"])

        text = resp.text.strip()
        return text or f"HTTP {resp.status_code}"


# ---------------------------------------------------------------------------
# Generic text-generation adapter (HuggingFace inference style)
# ---------------------------------------------------------------------------


class TextGenerationAdapter(BaseProviderAdapter):
    """Text-generation inference adapter. Sends only the current message."""

    capability = CapabilityType.GENERIC_TEXT

    max_length = 500
    repetition_penalty = 1.1

    def build_payload(self, provider: Provider, messages: list[dict[str, str]]) -> dict[str, Any]:
        return {
            "inputs": _current_message(messages),
            "parameters": {
                "max_length": self.max_length,
                "temperature": DEFAULT_TEMPERATURE,
                "do_sample": True,
                "return_full_text": False,
                "repetition_penalty": self.repetition_penalty,
            },
        }

    async def generate(self, provider: Provider, messages: list[dict[str, str]]) -> str:
        resp = await self._post(provider, self.build_payload(provider, messages))

        if not resp.is_success:
            body = redact(resp.text.strip(), provider.api_key) or "Unknown error"
            raise ProviderError(
                f"{provider.name} API error: {body}",
                error_code=ProviderError.HTTP_ERROR,
                status_code=resp.status_code,
            )

        invalid = ProviderError(
            f"Invalid response format from {provider.name}",
            error_code=ProviderError.INVALID_FORMAT,
            status_code=resp.status_code,
        )
        try:
            data = resp.json()
        except ValueError as e:
            raise invalid from e

        # Either [{"generated_text": ...}] or {"generated_text": ...}
        item = data[0] if isinstance(data, list) and data else data
        if not isinstance(item, dict):
            raise invalid

        text = item.get("generated_text")
        if isinstance(text, str):
            return text

        if item.get("error"):
            error_text = redact(str(item["error"]), provider.api_key)
            raise ProviderError(
                f"{provider.name} error: {error_text}",
                error_code=ProviderError.UPSTREAM_ERROR,
                status_code=resp.status_code,
            )

        raise invalid


def _current_message(messages: list[dict[str, str]]) -> str:
    """Content of the last user turn in the conversation."""
    for message in reversed(messages):
        if message.get("role") == "user":
            return message.get("content", "")
    return ""


# ---------------------------------------------------------------------------
# Adapter registry
# ---------------------------------------------------------------------------

ADAPTER_REGISTRY: dict[CapabilityType, type[BaseProviderAdapter]] = {
    CapabilityType.CHAT_COMPLETION: ChatCompletionAdapter,
    CapabilityType.GENERIC_TEXT: TextGenerationAdapter,
}


def get_adapter(capability: CapabilityType, **kwargs) -> BaseProviderAdapter:
    """Factory: get the adapter for a capability type."""
    cls = ADAPTER_REGISTRY.get(capability)
    if cls is None:
        raise ValueError(f"No adapter registered for capability: {capability}")
    return cls(**kwargs)
