"""
HTTP tests for POST /api/chat.

Strategy:
    - Build a lightweight FastAPI app with the chat router and the error handlers
    - Put a real TelemetryStore/Orchestrator/AdaptiveRouter on app.state
    - Replace the provider factory with FakeProvider and the image client with FakeImageClient
"""

from contextlib import asynccontextmanager
from unittest.mock import patch

import httpx
import pytest
from fastapi import FastAPI
from starlette.testclient import TestClient

from errors import UpstreamError, register_exception_handlers
from routers.chat_orchestration import AdaptiveRouter, Orchestrator
from routers.chat_orchestration.prompts import BASE_SYSTEM_PROMPT
from services.providers import ClaudeAdapter
from services.telemetry_store import TelemetryStore

from conftest import FakeImageClient, FakeProvider, make_record

_PATCH_CREATE_PROVIDER = "routers.chat.create_provider"

QWEN_CODER = "Qwen3-Coder-480B"
GLM = "GLM-4.5-Air"


def _build_test_app(store, image_client):
    @asynccontextmanager
    async def noop_lifespan(app):
        yield

    app = FastAPI(lifespan=noop_lifespan)
    register_exception_handlers(app)

    from routers.chat import router as chat_router
    app.include_router(chat_router)

    app.state.telemetry_store = store
    app.state.orchestrator = Orchestrator(store, image_client)
    app.state.adaptive_router = AdaptiveRouter(store)
    return app


def _body(content="hello", **overrides):
    body = {
        "provider": "groq",
        "model": "llama-3.3-70b",
        "messages": [{"role": "user", "content": content}],
    }
    body.update(overrides)
    return body


class TestChatEndpoint:
    @pytest.fixture(autouse=True)
    def _env(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "groq-key")
        monkeypatch.setenv("BYTEZ_API_KEY", "bytez-key")
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    def setup_method(self):
        self.store = TelemetryStore()
        self.image_client = FakeImageClient(url="https://img.example/out.png")
        self.app = _build_test_app(self.store, self.image_client)
        self.client = TestClient(self.app, raise_server_exceptions=False)

    def _post(self, body, provider=None):
        provider = provider or FakeProvider(reply="Hi!")
        with patch(_PATCH_CREATE_PROVIDER, return_value=provider) as factory:
            resp = self.client.post("/api/chat", json=body)
        return resp, provider, factory

    # -- validation ---------------------------------------------------------

    def test_unknown_provider(self):
        resp, provider, _ = self._post(_body(provider="mistral"))
        assert resp.status_code == 400
        assert resp.json()["error"] == "Unknown provider: mistral"
        assert provider.calls == []

    def test_missing_model(self):
        body = _body()
        del body["model"]
        resp, _, _ = self._post(body)
        assert resp.status_code == 400
        assert "model" in resp.json()["error"]

    @pytest.mark.parametrize("messages", [[], None])
    def test_missing_or_empty_messages(self, messages):
        resp, _, _ = self._post(_body(messages=messages))
        assert resp.status_code == 400
        assert "messages" in resp.json()["error"]

    def test_invalid_role(self):
        resp, _, _ = self._post(_body(messages=[{"role": "robot", "content": "beep"}]))
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_INVALID_FORMAT"

    def test_malformed_body(self):
        resp, _, _ = self._post(_body(messages="not a list"))
        assert resp.status_code == 400

    def test_missing_credential_names_variable(self):
        resp, provider, factory = self._post(_body(provider="gemini"))
        assert resp.status_code == 500
        assert "GEMINI_API_KEY" in resp.json()["error"]
        factory.assert_not_called()

    # -- success shapes -----------------------------------------------------

    def test_buffered_reply(self):
        resp, provider, factory = self._post(_body("hello there"))

        assert resp.status_code == 200
        assert resp.json() == {"reply": "Hi!", "model": "llama-3.3-70b"}
        assert factory.call_args.args[:2] == ("groq", "groq-key")

        sent = provider.calls[0]["messages"]
        assert sent[0].role == "system"
        assert sent[0].content == BASE_SYSTEM_PROMPT
        assert sent[-1].content == "hello there"
        assert len(self.store.get_all()) == 1

    def test_custom_system_prompt_and_params(self):
        resp, provider, _ = self._post(
            _body(systemPrompt="Answer in French.", params={"temperature": 0.1, "max_tokens": 50})
        )
        assert resp.status_code == 200
        call = provider.calls[0]
        assert call["messages"][0].content == "Answer in French."
        assert call["params"].temperature == 0.1
        assert call["params"].max_tokens == 50

    def test_default_provider_is_bytez(self):
        body = _body()
        del body["provider"]
        resp, _, factory = self._post(body)
        assert resp.status_code == 200
        assert factory.call_args.args[:2] == ("bytez", "bytez-key")

    def test_composite_reply(self):
        resp, provider, _ = self._post(
            _body("explain photosynthesis and create an image of it"),
            provider=FakeProvider(reply="Plants make sugar."),
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["type"] == "composite"
        assert data["reply"] == "Plants make sugar."
        assert data["content"] == {"text": "Plants make sugar.", "imageUrl": "https://img.example/out.png"}
        assert [s["step"] for s in data["executionTrace"]] == ["model", "image"]
        assert data["model"] == "llama-3.3-70b"

    def test_image_model_forwarded(self):
        self._post(_body("explain tcp and draw a diagram", imageModel="custom/img"))
        assert self.image_client.calls[0]["model_id"] == "custom/img"

    def test_stream_reply(self):
        resp, provider, _ = self._post(
            _body("explain photosynthesis and create an image", stream=True),
            provider=FakeProvider(stream_chunks=["Hel", "lo"]),
        )

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/event-stream")
        assert resp.headers["cache-control"] == "no-cache"
        assert '"content": "Hel"' in resp.text
        assert resp.text.endswith("data: [DONE]\n\n")
        # Streaming never takes the composite path
        assert self.image_client.calls == []

    # -- failures -----------------------------------------------------------

    def test_upstream_failure_is_502(self):
        resp, _, _ = self._post(
            _body(), provider=FakeProvider(error=UpstreamError("Groq API error: 503 - unavailable"))
        )
        assert resp.status_code == 502
        assert resp.json()["error"] == "Groq API error: 503 - unavailable"
        assert self.store.get_all()[0].error is True

    def test_malformed_upstream_body_is_502(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "claude-key")
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=["unexpected"]))
        resp, _, _ = self._post(
            _body(provider="claude", model="claude-sonnet"),
            provider=ClaudeAdapter("claude-key", transport=transport),
        )
        assert resp.status_code == 502
        assert resp.json()["error"].startswith("Claude API error: unexpected response body")

    def test_unexpected_failure_is_generic_500(self):
        resp, _, _ = self._post(_body(), provider=FakeProvider(error=RuntimeError("socket exploded")))
        assert resp.status_code == 500
        assert resp.json()["error"] == "Internal server error"

    # -- adaptive routing ---------------------------------------------------

    def test_adaptive_selects_from_candidates(self):
        for _ in range(3):
            self.store.record(make_record("unrelated"))

        resp, provider, _ = self._post(
            _body("fix this bug in my function", adaptive=True, candidates=[GLM, QWEN_CODER], model=GLM)
        )

        assert resp.status_code == 200
        assert resp.json()["model"] == QWEN_CODER
        assert provider.calls[0]["model"] == QWEN_CODER

    def test_adaptive_falls_back_without_history(self):
        resp, provider, _ = self._post(
            _body("fix this bug", adaptive=True, candidates=[QWEN_CODER], model=GLM)
        )
        assert resp.json()["model"] == GLM
        assert provider.calls[0]["model"] == GLM
