"""Core types and DTOs for the provider failover gateway."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_MAX_TOKENS = 2000
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "JARVIS-AI/2.0"
HISTORY_WINDOW = 6  # Caller-supplied turns forwarded upstream
MAX_MESSAGE_LENGTH = 10_000
MIN_RESPONSE_LENGTH = 10  # Response must be strictly longer than this
MIN_CREDENTIAL_LENGTH = 10  # Credential must be strictly longer than this

SYSTEM_PROMPT = """You are JARVIS (Just A Rather Very Intelligent System), an advanced AI assistant with unlimited knowledge and capabilities.

Guidelines:
- Provide helpful, accurate, and detailed responses
- Be engaging, supportive, and intelligent
- Use clear formatting with **bold** and *italic* when helpful
- No topic restrictions - answer any question asked
- Include examples and real-world applications when relevant
- Be encouraging and positive in your responses

You can discuss any topic without limitations. Provide comprehensive, intelligent responses that demonstrate your advanced capabilities."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class CapabilityType(str, Enum):
    """Request/response schema family a provider speaks."""

    CHAT_COMPLETION = "chat-completion"  # OpenAI-compatible /chat/completions
    GENERIC_TEXT = "generic-text"  # HuggingFace-style text-generation inference


class TurnRole(str, Enum):
    """Author of a conversation turn."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


# ---------------------------------------------------------------------------
# Provider (static configuration entity)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Provider:
    """An upstream text-generation endpoint.

    Built once at startup and never mutated. The credential is excluded
    from ``repr`` so a provider can be logged safely.
    """

    name: str
    url: str
    api_key: str = field(default="", repr=False)
    capability: CapabilityType = CapabilityType.CHAT_COMPLETION
    priority: int = 1  # Lower = tried first
    model: str | None = None
    max_tokens: int | None = None
    description: str = ""
    extra_headers: dict[str, str] = field(default_factory=dict, hash=False, compare=False)

    @property
    def has_valid_credential(self) -> bool:
        """True if the credential is present, non-placeholder and long enough."""
        key = (self.api_key or "").strip()
        if not key or is_placeholder_credential(key):
            return False
        return len(key) > MIN_CREDENTIAL_LENGTH


def is_placeholder_credential(key: str) -> bool:
    """Detect template values such as ``your_groq_api_key_here``."""
    lowered = key.strip().lower()
    return lowered.startswith("your_") and lowered.endswith("_here")


# ---------------------------------------------------------------------------
# Chat request / result
# ---------------------------------------------------------------------------


@dataclass
class ConversationTurn:
    """One prior message supplied by the caller. Never persisted here."""

    role: TurnRole
    content: str
    timestamp: datetime | None = None

    def to_message(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass
class ChatRequest:
    """Normalized input to the orchestrator.

    ``message`` holds the raw caller value; the orchestrator validates it.
    """

    message: Any = None
    history: list[ConversationTurn] = field(default_factory=list)


@dataclass
class ChatResult:
    """Uniform output, the same shape regardless of which provider answered."""

    response: str
    provider: str
    model: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    processing_time_ms: int = 0

    def to_dict(self) -> dict:
        """Serialize to the JSON body of a successful chat call."""
        return {
            "response": self.response,
            "provider": self.provider,
            "model": self.model,
            "timestamp": self.timestamp.isoformat(),
            "processing_time_ms": self.processing_time_ms,
        }


@dataclass
class ProviderFailure:
    """One failed provider attempt, kept for diagnostics only."""

    provider: str
    message: str
    error_code: str = ""
