# This file defines request payloads for the AI assistant endpoints.
# It exists so message sizes are bounded before any prompt reaches the completion provider.

from __future__ import annotations

from typing import Any

from pydantic import Field

from portfolio.api.schemas.common import CamelModel, bounded_text


class ChatRequest(CamelModel):
    message: bounded_text(1000, min_length=1)
    context: bounded_text(2000) | None = None
    conversation_id: str | None = None


class AssistantRequest(CamelModel):
    query: bounded_text(1000, min_length=1)
    preferences: dict[str, Any] = Field(default_factory=dict)


class FeedbackRequest(CamelModel):
    conversation_id: bounded_text(200, min_length=1)
    response_id: str | None = None
    rating: int = Field(ge=1, le=5)
    feedback: bounded_text(1000) | None = None
