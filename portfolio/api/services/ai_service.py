# This file implements the AI assistant wrapper around the chat completion provider.
# It exists so prompt assembly, company context caching, and provider failures stay out of routers.
# A missing or failing provider surfaces as a 503 carrying a human fallback message.
# Company context is rebuilt at most once per TTL window; concurrent rebuilds are tolerated.

from __future__ import annotations

import logging
import secrets
import string
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from openai import OpenAI, OpenAIError
from sqlalchemy.exc import SQLAlchemyError

from portfolio.api.api_config import ApiConfig
from portfolio.api.db_access import DocumentStore
from portfolio.catalog.timestamps import now_timestamp
from portfolio.common.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

CAPABILITIES = (
    "Company information queries",
    "Service recommendations",
    "Team member suggestions",
    "Project case studies",
    "General business assistance",
)

CHAT_UNAVAILABLE = "AI service is currently unavailable. Please contact us directly."
CHAT_FALLBACK = (
    "Our AI assistant is temporarily unavailable. Please feel free to contact us directly through our "
    "contact form or email, and our team will be happy to assist you with any questions about our "
    "services, projects, or team."
)
CHAT_FAILED = "Sorry, I encountered an error. Please try again or contact us directly."
ASSISTANT_UNAVAILABLE = "AI assistant is currently unavailable. Please contact our team directly."
ASSISTANT_FALLBACK = (
    "Our AI assistant is temporarily unavailable. Our team would be happy to provide personalized "
    "recommendations based on your requirements. Please contact us directly."
)
ASSISTANT_FAILED = "Sorry, I encountered an error generating recommendations."
FEEDBACK_THANKS = "Thank you for your feedback! This helps us improve our AI assistant."

CONTEXT_CLOSING = "We specialize in web development, mobile apps, UI/UX design, real estate, and consulting.\n"

CHAT_PROMPT = (
    "You are an AI assistant for a company. Help users understand our services.\n\n"
    "COMPANY INFO:\n{context}\n\n"
    "USER: {message}\n\n"
    "Respond helpfully:"
)
RECOMMENDATION_PROMPT = (
    "Based on the query and preferences, provide business recommendations.\n\n"
    "COMPANY INFO:\n{context}\n\n"
    "QUERY: {query}\n"
    "PREFERENCES: {preferences}\n\n"
    "Provide recommendations:"
)

_CONVERSATION_ALPHABET = string.ascii_lowercase + string.digits


def generate_conversation_id() -> str:
    suffix = "".join(secrets.choice(_CONVERSATION_ALPHABET) for _ in range(9))
    return f"conv_{int(time.time() * 1000)}_{suffix}"


@dataclass
class CacheEntry:
    value: str
    expires_at: float


class ContextCache:
    """Single-value TTL cache for the assembled company context."""

    def __init__(self, *, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: CacheEntry | None = None
        self._lock = threading.Lock()

    def get_or_refresh(self, loader: Callable[[], str]) -> str:
        with self._lock:
            entry = self._entry
        if entry is not None and self._clock() < entry.expires_at:
            return entry.value
        value = loader()
        with self._lock:
            self._entry = CacheEntry(value=value, expires_at=self._clock() + self.ttl_seconds)
        return value

    def invalidate(self) -> None:
        with self._lock:
            self._entry = None


class AIService:
    def __init__(
        self,
        *,
        config: ApiConfig,
        store: DocumentStore,
        cache: ContextCache,
        client: OpenAI | None,
    ) -> None:
        self.config = config
        self.store = store
        self.cache = cache
        self.client = client

    @property
    def available(self) -> bool:
        return self.client is not None

    def status(self) -> dict[str, Any]:
        prefix = self.config.api_version_path
        return {
            "available": self.available,
            "model": self.config.openai_model if self.available else None,
            "apiKeyConfigured": self.config.ai_configured,
            "endpoints": {"chatbot": f"{prefix}/ai/chatbot", "assistant": f"{prefix}/ai/assistant"},
            "capabilities": list(CAPABILITIES),
        }

    def _fallback(self, message: str) -> dict[str, Any]:
        return {"message": message, "contactInfo": self.config.contact_info()}

    def _section(self, title: str, collection: str, line: Callable[[Mapping[str, Any]], str], unavailable: str) -> str:
        try:
            documents = self.store.scan(collection)
        except SQLAlchemyError:
            logger.warning("Could not load %s for AI context", collection, exc_info=True)
            return f"{title}: {unavailable}\n\n"
        return f"{title}:\n" + "".join(f"- {line(document)}\n" for document in documents) + "\n"

    def load_company_context(self) -> str:
        return (
            "COMPANY PORTFOLIO\n\n"
            + self._section(
                "SERVICES",
                "services",
                lambda service: f"{service.get('name')}: {service.get('description')}",
                "Available on request",
            )
            + self._section(
                "PROJECTS",
                "projects",
                lambda project: f"{project.get('title')}: {project.get('category')}",
                "Portfolio available on request",
            )
            + CONTEXT_CLOSING
        )

    def company_context(self) -> str:
        return self.cache.get_or_refresh(self.load_company_context)

    def _complete(self, prompt: str, *, failure: str, fallback: str) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.config.openai_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.config.ai_temperature,
                max_tokens=self.config.ai_max_tokens,
            )
        except OpenAIError as exc:
            logger.error("AI completion failed: %s", exc)
            raise UpstreamUnavailableError(failure, fallback=self._fallback(fallback)) from exc
        return (response.choices[0].message.content or "").strip()

    def chat(self, message: str, *, context: str | None = None, conversation_id: str | None = None) -> dict[str, Any]:
        if not self.available:
            raise UpstreamUnavailableError(CHAT_UNAVAILABLE, fallback=self._fallback(CHAT_FALLBACK))
        company = self.company_context()
        prompt = CHAT_PROMPT.format(context=company, message=message)
        if context:
            prompt = f"CONVERSATION CONTEXT:\n{context}\n\n{prompt}"
        reply = self._complete(prompt, failure=CHAT_FAILED, fallback=CHAT_FALLBACK)
        logger.info(
            "Chatbot interaction conversation=%s message_length=%s",
            conversation_id or "new",
            len(message),
        )
        return {
            "response": reply,
            "conversationId": conversation_id or generate_conversation_id(),
            "timestamp": now_timestamp(),
        }

    def recommend(self, query: str, preferences: Mapping[str, Any] | None = None) -> dict[str, Any]:
        if not self.available:
            raise UpstreamUnavailableError(ASSISTANT_UNAVAILABLE, fallback=self._fallback(ASSISTANT_FALLBACK))
        preferences = dict(preferences or {})
        prompt = RECOMMENDATION_PROMPT.format(
            context=self.company_context(),
            query=query,
            preferences=", ".join(f"{key}: {value}" for key, value in preferences.items()),
        )
        recommendations = self._complete(prompt, failure=ASSISTANT_FAILED, fallback=ASSISTANT_FALLBACK)
        logger.info("AI assistant query=%r", query[:100])
        return {
            "recommendations": recommendations,
            "query": query,
            "preferences": preferences,
            "timestamp": now_timestamp(),
        }

    def feedback(self, conversation_id: str, rating: int, feedback: str | None = None) -> dict[str, Any]:
        logger.info(
            "AI feedback received conversation=%s rating=%s has_comment=%s",
            conversation_id,
            rating,
            bool(feedback),
        )
        return {"conversationId": conversation_id, "feedbackReceived": now_timestamp()}
