# This file tests the AI assistant endpoints with and without a completion provider.
# A stub client stands in for the provider so no network calls are made.

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import Any

from openai import OpenAIError

from tests.api.support import api_test_client, build_store, build_test_config, seed


class StubCompletions:
    def __init__(self, reply: str | None = None, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def stub_client(completions: StubCompletions) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_status_reports_unavailable_without_client(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)

    with api_test_client(config=config, store=store) as client:
        data = client.get("/api/v1/ai/status").json()["data"]

    assert data["available"] is False
    assert data["model"] is None
    assert data["endpoints"]["chatbot"] == "/api/v1/ai/chatbot"


def test_chat_without_client_returns_fallback(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)

    with api_test_client(config=config, store=store) as client:
        response = client.post("/api/v1/ai/chat", json={"message": "hello"})

    assert response.status_code == 503
    payload = response.json()
    assert payload["success"] is False
    assert "contactInfo" in payload["fallback"]


def test_chat_includes_company_context_in_prompt(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    seed(store, "services", {"name": "Cloud Setup", "description": "Cloud migrations", "category": "Consulting"})
    completions = StubCompletions(reply="  We can help.  ")

    with api_test_client(config=config, store=store, openai_client=stub_client(completions)) as client:
        response = client.post(
            "/api/v1/ai/chatbot",
            json={"message": "What do you do?", "context": "earlier turn", "conversationId": "conv_1"},
        )

    data = response.json()["data"]
    assert data["response"] == "We can help."
    assert data["conversationId"] == "conv_1"
    prompt = completions.calls[0]["messages"][0]["content"]
    assert prompt.startswith("CONVERSATION CONTEXT:\nearlier turn")
    assert "- Cloud Setup: Cloud migrations" in prompt
    assert "USER: What do you do?" in prompt


def test_provider_failure_maps_to_503(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    completions = StubCompletions(error=OpenAIError("boom"))

    with api_test_client(config=config, store=store, openai_client=stub_client(completions)) as client:
        response = client.post("/api/v1/ai/assistant", json={"query": "mobile app", "preferences": {"budget": "low"}})

    assert response.status_code == 503
    assert response.json()["error"] == "Sorry, I encountered an error generating recommendations."


def test_feedback_rating_is_bounded(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)

    with api_test_client(config=config, store=store) as client:
        accepted = client.post("/api/v1/ai/feedback", json={"conversationId": "conv_1", "rating": 5})
        rejected = client.post("/api/v1/ai/feedback", json={"conversationId": "conv_1", "rating": 9})

    assert accepted.json()["message"].startswith("Thank you for your feedback")
    assert rejected.status_code == 400
