"""
Shared pytest fixtures for MelonScope tests.

FakeProvider stands in for any ProviderAdapter: it records calls and answers
with a canned reply, a canned stream or a raised exception.
"""

from typing import Any, List, Optional, Sequence

import pytest

from services.providers import (
    SSE_DONE,
    BufferedReply,
    ChatParams,
    Message,
    ProviderAdapter,
    StreamedReply,
    sse_delta,
)
from services.telemetry_store import STEP_MODEL, ExecutionStep, TelemetryRecord, TelemetryStore


class FakeProvider(ProviderAdapter):
    """In-memory provider adapter."""

    name = "Fake"

    def __init__(
        self,
        reply: Any = "Hello from the model",
        error: Optional[Exception] = None,
        stream_chunks: Optional[List[str]] = None,
    ):
        super().__init__("test-key")
        self.reply = reply
        self.error = error
        self.stream_chunks = stream_chunks if stream_chunks is not None else ["Hel", "lo"]
        self.calls: List[dict] = []

    async def send(self, model: str, messages: Sequence[Message], params: ChatParams, stream: bool):
        self.calls.append({"model": model, "messages": list(messages), "params": params, "stream": stream})
        if self.error is not None:
            raise self.error
        if stream:
            return StreamedReply(self._chunks())
        return BufferedReply(self.reply)

    async def _chunks(self):
        for text in self.stream_chunks:
            yield sse_delta(text)
        yield SSE_DONE


class BrokenStreamProvider(FakeProvider):
    """Streams one delta, then loses the upstream connection."""

    async def _chunks(self):
        yield sse_delta("partial")
        raise ConnectionError("upstream reset")


class FakeImageClient:
    """ImageClient stand-in with the same generate() signature."""

    default_model = "stabilityai/stable-diffusion-xl-base-1.0"

    def __init__(self, url: str = "https://img.example/cat.png", error: Optional[Exception] = None):
        self.url = url
        self.error = error
        self.calls: List[dict] = []

    async def generate(self, text: str, model_id: Optional[str] = None) -> str:
        self.calls.append({"text": text, "model_id": model_id})
        if self.error is not None:
            raise self.error
        return self.url


def make_record(
    model: str = "Qwen/Qwen2.5-7B-Instruct",
    duration_ms: int = 1000,
    error: bool = False,
    composite: bool = False,
) -> TelemetryRecord:
    """Single-step record for seeding the store."""
    return TelemetryRecord(
        composite=composite,
        models_used=(model,),
        total_duration_ms=duration_ms,
        execution_trace=(ExecutionStep(STEP_MODEL, model, duration_ms),),
        error=error,
    )


@pytest.fixture
def store():
    return TelemetryStore()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def fake_image_client():
    return FakeImageClient()
