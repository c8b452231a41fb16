"""
MelonScope Chat Router - POST /api/chat

Validates the request, resolves the provider adapter and credential, applies
the system prompt and (optionally) adaptive model selection, then hands the
request to the Orchestrator.

Response shapes:
- stream=true          -> text/event-stream of uniform delta events
- buffered             -> {"reply", "model"}
- composite            -> {"reply", "type", "content", "executionTrace", "model"}

Errors are raised as MelonScopeError subclasses and rendered by the handlers
in errors/handlers.py.
"""

import logging
import time
from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from config import runtime_config
from errors import ConfigurationError, ErrorCode, ValidationError
from logging_config import log_message_in, log_message_out
from services.model_catalog import models_for_provider
from services.providers import (
    DEFAULT_PROVIDER,
    VALID_ROLES,
    ChatParams,
    Message,
    StreamedReply,
    create_provider,
    get_provider_spec,
)

from .chat_orchestration import (
    AdaptiveRouter,
    CompositeResult,
    OrchestrationContext,
    Orchestrator,
    build_messages,
    infer_task_intent,
)
from .chat_orchestration.prompts import latest_user_message
from .chat_streaming import SSE_HEADERS, SSE_MEDIA_TYPE
from .dependencies import get_adaptive_router, get_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


class ChatMessageIn(BaseModel):
    role: str
    content: str


class ChatParamsIn(BaseModel):
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


class ChatRequest(BaseModel):
    messages: Optional[List[ChatMessageIn]] = None
    provider: str = DEFAULT_PROVIDER
    model: Optional[str] = None
    params: Optional[ChatParamsIn] = None
    stream: bool = False
    systemPrompt: Optional[str] = None
    adaptive: bool = False
    candidates: Optional[List[str]] = None
    imageModel: Optional[str] = None


def _validate_messages(body: ChatRequest) -> List[Message]:
    if not body.messages:
        raise ValidationError(
            "messages must be a non-empty list",
            parameter="messages",
            code=ErrorCode.VALIDATION_MISSING_PARAM,
        )

    messages = []
    for m in body.messages:
        if m.role not in VALID_ROLES:
            raise ValidationError(
                f"Invalid message role: {m.role}",
                parameter="messages.role",
                expected=", ".join(VALID_ROLES),
                received=m.role,
                code=ErrorCode.VALIDATION_INVALID_FORMAT,
            )
        messages.append(Message(m.role, m.content))
    return messages


def _resolve_params(params: Optional[ChatParamsIn]) -> ChatParams:
    defaults = runtime_config.get_llm_params()
    if params is None:
        return ChatParams(**defaults)
    return ChatParams(
        temperature=params.temperature if params.temperature is not None else defaults["temperature"],
        max_tokens=params.max_tokens if params.max_tokens is not None else defaults["max_tokens"],
    )


@router.post("/api/chat")
async def chat(
    body: ChatRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
    adaptive_router: AdaptiveRouter = Depends(get_adaptive_router),
):
    """Run one chat request through the orchestrator."""
    spec = get_provider_spec(body.provider)

    if not body.model or not body.model.strip():
        raise ValidationError(
            "Missing required parameter: model",
            parameter="model",
            code=ErrorCode.VALIDATION_MISSING_PARAM,
        )
    messages = _validate_messages(body)

    api_key = runtime_config.get_credential(spec.env_var)
    if not api_key:
        raise ConfigurationError(
            f"{spec.env_var} not configured",
            details=f"Set {spec.env_var} in the server environment to use {spec.name}",
            env_var=spec.env_var,
        )

    # Only the OpenAI provider honours a base URL override
    base_url = runtime_config.openai_base_url if body.provider == "openai" else None
    provider = create_provider(
        body.provider,
        api_key,
        base_url=base_url or None,
        timeout=runtime_config.llm_timeout,
    )

    latest = latest_user_message(messages)
    prompt = latest.content if latest else ""

    model = body.model
    if body.adaptive:
        candidates = body.candidates or models_for_provider(body.provider)
        model = adaptive_router.select_model(infer_task_intent(prompt), candidates, fallback=body.model)

    log_message_in(logger, prompt, provider=body.provider, model=model, stream=body.stream)
    start = time.perf_counter()

    context = OrchestrationContext(
        provider=provider,
        model=model,
        messages=build_messages(body.systemPrompt, messages),
        params=_resolve_params(body.params),
        stream=body.stream,
        image_model=body.imageModel,
    )
    result = await orchestrator.run(prompt, context)
    duration_ms = int((time.perf_counter() - start) * 1000)

    if isinstance(result, StreamedReply):
        log_message_out(logger, "stream", models_used=[model], duration_ms=duration_ms)
        return StreamingResponse(result.chunks, media_type=SSE_MEDIA_TYPE, headers=SSE_HEADERS)

    if isinstance(result, CompositeResult):
        log_message_out(
            logger,
            "composite",
            models_used=[step.model for step in result.execution_trace],
            duration_ms=duration_ms,
        )
        return {"reply": result.text, **result.to_dict(), "model": model}

    log_message_out(logger, "buffered", models_used=[model], duration_ms=duration_ms)
    return {"reply": result.text, "model": model}
