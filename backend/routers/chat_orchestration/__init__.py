"""
MelonScope Chat Orchestration - request execution components

Components:
- classifier: composite (text -> image) detection over constant tables
- adaptive_router: telemetry-driven model selection
- prompts: task-intent inference and system prompt construction
- orchestrator: single-step / composite execution with telemetry

Fallback logic (router):
    1. Fewer than 3 telemetry records -> requested model
    2. No candidates                  -> requested model
    3. Any scoring error              -> requested model

Routing never fails a request; only upstream calls can.
"""

from .adaptive_router import INTENT_WEIGHTS, AdaptiveRouter
from .classifier import is_composite
from .orchestrator import (
    CompositeResult,
    OrchestrationContext,
    Orchestrator,
    build_messages_with_prompt,
)
from .prompts import build_messages, build_system_prompt, infer_task_intent

__all__ = [
    "INTENT_WEIGHTS",
    "AdaptiveRouter",
    "is_composite",
    "CompositeResult",
    "OrchestrationContext",
    "Orchestrator",
    "build_messages_with_prompt",
    "build_messages",
    "build_system_prompt",
    "infer_task_intent",
]
