"""
MelonScope Orchestrator - single-step vs. composite execution.

Flow:
    Start -> classify -> single step                -> Complete | Failed
                      -> text step -> image step    -> Complete | Failed

- Composite only when the prompt classifies as composite AND the request is
  not streaming; the image step has to block on the full text.
- Every run, successful or not, leaves exactly one TelemetryRecord.
  Failures are recorded with the trace captured so far and then re-raised.
  A streamed reply is recorded when its relay finishes, so a stream that
  breaks mid-way counts as an error.
- No retries. A failed upstream call fails the request.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple, Union

from errors.exceptions import LLMError
from logging_config import log_llm
from services.image_client import ImageClient
from services.providers import (
    BufferedReply,
    ChatParams,
    Message,
    ProviderAdapter,
    ProviderReply,
    StreamedReply,
)
from services.telemetry_store import (
    STEP_IMAGE,
    STEP_MODEL,
    ExecutionStep,
    TelemetryRecord,
    TelemetryStore,
)

from .classifier import is_composite

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _delta_text_length(chunk: Union[bytes, str]) -> int:
    """Characters of delta content carried by one uniform SSE chunk."""
    total = 0
    text = chunk.decode("utf-8", errors="replace") if isinstance(chunk, bytes) else chunk
    for line in text.splitlines():
        if not line.startswith("data: ") or line == "data: [DONE]":
            continue
        try:
            choices = json.loads(line[len("data: "):]).get("choices") or []
            total += len(choices[0]["delta"].get("content") or "")
        except (ValueError, AttributeError, LookupError, TypeError):
            continue
    return total


@dataclass
class OrchestrationContext:
    """Everything one orchestration needs besides the prompt."""

    provider: ProviderAdapter
    model: str
    messages: List[Message]
    params: ChatParams = field(default_factory=ChatParams)
    stream: bool = False
    image_model: Optional[str] = None


@dataclass(frozen=True)
class CompositeResult:
    text: str
    image_url: str
    execution_trace: Tuple[ExecutionStep, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "composite",
            "content": {"text": self.text, "imageUrl": self.image_url},
            "executionTrace": [step.to_dict() for step in self.execution_trace],
        }


def build_messages_with_prompt(messages: Sequence[Message], prompt: str) -> List[Message]:
    """Replace the content of the most recent user message with prompt.

    Appends a new user message when the history has none. The input list is
    not modified.
    """
    updated = list(messages)
    for i in range(len(updated) - 1, -1, -1):
        if updated[i].role == "user":
            updated[i] = Message("user", prompt)
            return updated
    updated.append(Message("user", prompt))
    return updated


class Orchestrator:
    """
    Runs one chat request against a provider and records its telemetry.

    Usage:
        orchestrator = Orchestrator(store, image_client)
        result = await orchestrator.run(prompt, OrchestrationContext(...))
    """

    def __init__(self, store: TelemetryStore, image_client: ImageClient):
        self.store = store
        self.image_client = image_client

    async def run(self, prompt: str, context: OrchestrationContext) -> Union[ProviderReply, CompositeResult]:
        start = time.perf_counter()

        if not context.stream and is_composite(prompt.lower()):
            logger.info("Composite request detected (text -> image)")
            return await self._run_composite(prompt, context, start)

        return await self._run_single(context, start)

    async def _run_single(self, context: OrchestrationContext, start: float) -> ProviderReply:
        log_llm(logger, "start", model=context.model)
        step_start = time.perf_counter()

        try:
            reply = await context.provider.send(
                context.model, context.messages, context.params, context.stream
            )
        except Exception:
            step = ExecutionStep(STEP_MODEL, context.model, _elapsed_ms(step_start))
            self._record(False, [step], start, error=True)
            raise

        if isinstance(reply, StreamedReply):
            return StreamedReply(self._relay(reply.chunks, context.model, step_start, start))

        step = ExecutionStep(STEP_MODEL, context.model, _elapsed_ms(step_start))
        log_llm(logger, "end", model=context.model, duration_ms=step.duration_ms)

        text_length = None
        if isinstance(reply, BufferedReply) and isinstance(reply.text, str):
            text_length = len(reply.text)

        self._record(False, [step], start, text_length=text_length)
        return reply

    async def _relay(
        self, chunks: AsyncIterator[bytes], model: str, step_start: float, start: float
    ) -> AsyncIterator[bytes]:
        """Pass stream chunks through; record telemetry once the stream ends.

        A failure while relaying is recorded as error=True and re-raised.
        A client that stops reading early leaves a non-error record.
        """
        text_length = 0
        error = False
        try:
            async for chunk in chunks:
                text_length += _delta_text_length(chunk)
                yield chunk
        except Exception as e:
            error = True
            logger.error(f"Stream from {model} failed mid-relay: {e}")
            raise
        finally:
            step = ExecutionStep(STEP_MODEL, model, _elapsed_ms(step_start))
            log_llm(logger, "end", model=model, duration_ms=step.duration_ms)
            self._record(False, [step], start, text_length=text_length, error=error)

    async def _run_composite(self, prompt: str, context: OrchestrationContext, start: float) -> CompositeResult:
        trace: List[ExecutionStep] = []
        pending: Optional[Tuple[str, str, float]] = None  # (step, model, started) of the call in flight
        text: Optional[str] = None

        try:
            messages = build_messages_with_prompt(context.messages, prompt)

            pending = (STEP_MODEL, context.model, time.perf_counter())
            log_llm(logger, "start", model=context.model)
            reply = await context.provider.send(context.model, messages, context.params, False)
            trace.append(ExecutionStep(STEP_MODEL, context.model, _elapsed_ms(pending[2])))
            pending = None
            log_llm(logger, "end", model=context.model, duration_ms=trace[-1].duration_ms)

            output = reply.text if isinstance(reply, BufferedReply) else None
            if not isinstance(output, str) or not output:
                raise LLMError(
                    "Text model returned invalid output",
                    details=f"Expected non-empty text, got {type(output).__name__}",
                    model=context.model,
                    error_type="invalid",
                )
            text = output

            image_model = context.image_model or self.image_client.default_model
            pending = (STEP_IMAGE, image_model, time.perf_counter())
            image_url = await self.image_client.generate(text, image_model)
            trace.append(ExecutionStep(STEP_IMAGE, image_model, _elapsed_ms(pending[2])))
            pending = None

        except Exception as e:
            if pending is not None:
                step_name, model, started = pending
                trace.append(ExecutionStep(step_name, model, _elapsed_ms(started)))
            logger.error(f"Composite orchestration failed after {len(trace)} step(s): {e}")
            self._record(
                True,
                trace,
                start,
                text_length=len(text) if text else None,
                error=True,
            )
            raise

        self._record(True, trace, start, text_length=len(text), image_generated=True)
        return CompositeResult(text=text, image_url=image_url, execution_trace=tuple(trace))

    def _record(
        self,
        composite: bool,
        trace: Sequence[ExecutionStep],
        start: float,
        text_length: Optional[int] = None,
        image_generated: bool = False,
        error: bool = False,
    ) -> None:
        self.store.record(
            TelemetryRecord(
                composite=composite,
                models_used=tuple(step.model for step in trace),
                total_duration_ms=_elapsed_ms(start),
                execution_trace=tuple(trace),
                text_length=text_length,
                image_generated=image_generated,
                error=error,
            )
        )
