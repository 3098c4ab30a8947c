# This file defines AI assistant endpoints under the versioned API path.
# It exists so the chatbot and recommendation assistant share rate limits and failure handling.
# A missing or failing provider answers 503 with a fallback message and contact details.

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from portfolio.api.dependencies import get_ai_service
from portfolio.api.rate_limits import ai_limit, limiter
from portfolio.api.response_envelope import build_object_envelope
from portfolio.api.schemas.ai_schemas import AssistantRequest, ChatRequest, FeedbackRequest
from portfolio.api.services.ai_service import FEEDBACK_THANKS, AIService

router = APIRouter(prefix="/ai", tags=["ai"])
AIServiceDep = Annotated[AIService, Depends(get_ai_service)]


def _chat(body: ChatRequest, service: AIService) -> dict[str, object]:
    reply = service.chat(body.message, context=body.context, conversation_id=body.conversation_id)
    return build_object_envelope(reply)


@router.post("/chat")
@limiter.limit(ai_limit)
def chat(request: Request, body: ChatRequest, service: AIServiceDep) -> dict[str, object]:
    return _chat(body, service)


@router.post("/chatbot")
@limiter.limit(ai_limit)
def chatbot(request: Request, body: ChatRequest, service: AIServiceDep) -> dict[str, object]:
    return _chat(body, service)


@router.post("/assistant")
@limiter.limit(ai_limit)
def assistant(request: Request, body: AssistantRequest, service: AIServiceDep) -> dict[str, object]:
    return build_object_envelope(service.recommend(body.query, body.preferences))


@router.get("/status")
def ai_status(service: AIServiceDep) -> dict[str, object]:
    return build_object_envelope(service.status())


@router.post("/feedback")
@limiter.limit(ai_limit)
def ai_feedback(request: Request, body: FeedbackRequest, service: AIServiceDep) -> dict[str, object]:
    received = service.feedback(body.conversation_id, body.rating, body.feedback)
    return build_object_envelope(received, message=FEEDBACK_THANKS)
