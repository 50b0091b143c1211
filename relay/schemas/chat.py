from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel

from relay.gateway.types import ChatRequest, ConversationTurn, TurnRole


class HistoryTurn(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str
    timestamp: datetime | None = None  # ISO-8601 or epoch milliseconds


class ChatBody(BaseModel):
    # Left untyped: a missing or non-string message is a 400 from the orchestrator
    message: Any = None
    history: list[HistoryTurn] | None = None

    def to_request(self) -> ChatRequest:
        return ChatRequest(
            message=self.message,
            history=[
                ConversationTurn(role=TurnRole(t.role), content=t.content, timestamp=t.timestamp)
                for t in self.history or []
            ],
        )


class ChatResponse(BaseModel):
    response: str
    provider: str
    model: str
    timestamp: datetime
    processing_time_ms: int


class ErrorResponse(BaseModel):
    error: str
    message: str
    providers_tried: list[str] | None = None


class RateLimitStats(BaseModel):
    tracked_clients: int
    limit: int
    window_seconds: float
    window_remaining_seconds: float


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    environment: str
    apis_configured: int
    apis_total: int
    keys_valid: bool
    rate_limit: RateLimitStats
