"""
Adaptive Router - picks a model from recent telemetry.

Each candidate is scored on four signals and the highest total wins:

    intent      static per-intent weight table (default 5)
    latency     mean totalDurationMs of records that used the model
    reliability number of those records flagged as errors
    usage       -3 once a model appears in more than 20 records

Too little history (fewer than MIN_HISTORY records) returns the fallback
unchanged. The router never raises; any scoring failure logs a warning and
returns the fallback.
"""

import logging
from typing import Dict, List, Optional, Sequence

from services.telemetry_store import TelemetryRecord, TelemetryStore

logger = logging.getLogger(__name__)

MIN_HISTORY = 3
NEUTRAL_SCORE = 5
HEAVY_USE_THRESHOLD = 20
HEAVY_USE_PENALTY = -3

# Looked up by exact model id; unlisted pairs score NEUTRAL_SCORE
INTENT_WEIGHTS: Dict[str, Dict[str, int]] = {
    "coding": {
        "Qwen3-Coder-480B": 10,
        "Qwen2.5-7B-Instruct": 7,
        "DeepSeek-V3.2": 6,
    },
    "reasoning": {
        "DeepSeek-V3.2": 10,
        "LLaMA-3.3-70B": 8,
        "Qwen3-Coder-480B": 6,
    },
    "creative": {
        "GLM-4.5-Air": 9,
        "Qwen2.5-7B-Instruct": 7,
    },
    "general": {},
}


def _records_for(model: str, records: Sequence[TelemetryRecord]) -> List[TelemetryRecord]:
    return [r for r in records if model in r.models_used]


def intent_score(intent: str, model: str) -> int:
    """Static weight of model for intent; NEUTRAL_SCORE when the pair is not listed."""
    return INTENT_WEIGHTS.get(intent, {}).get(model, NEUTRAL_SCORE)


def latency_score(model: str, records: Sequence[TelemetryRecord]) -> int:
    relevant = _records_for(model, records)
    if not relevant:
        return NEUTRAL_SCORE

    avg = sum(r.total_duration_ms for r in relevant) / len(relevant)
    if avg < 2000:
        return 8
    if avg < 5000:
        return 5
    return 2


def reliability_score(model: str, records: Sequence[TelemetryRecord]) -> int:
    relevant = _records_for(model, records)
    if not relevant:
        return NEUTRAL_SCORE

    errors = sum(1 for r in relevant if r.error)
    if errors == 0:
        return 8
    if errors < 3:
        return 5
    return 2


def usage_penalty(model: str, records: Sequence[TelemetryRecord]) -> int:
    if len(_records_for(model, records)) > HEAVY_USE_THRESHOLD:
        return HEAVY_USE_PENALTY
    return 0


def score_model(intent: str, model: str, records: Sequence[TelemetryRecord]) -> int:
    return (
        intent_score(intent, model)
        + latency_score(model, records)
        + reliability_score(model, records)
        + usage_penalty(model, records)
    )


class AdaptiveRouter:
    """
    Chooses a model per request from the shared telemetry history.

    Usage:
        router = AdaptiveRouter(store)
        model = router.select_model("coding", candidates, fallback=requested_model)
    """

    def __init__(self, store: TelemetryStore):
        self.store = store

    def select_model(
        self,
        intent: str,
        candidates: Optional[Sequence[str]],
        fallback: str,
    ) -> str:
        try:
            # One snapshot so every candidate is scored against the same history
            records = self.store.get_all()
            if len(records) < MIN_HISTORY:
                return fallback
            if not candidates:
                return fallback

            scored = [(model, score_model(intent, model, records)) for model in candidates]
            # sorted() is stable: ties keep candidate order
            scored = sorted(scored, key=lambda item: -item[1])

            best_model, best_score = scored[0]
            logger.info(f"Adaptive routing ({intent}): {best_model} score={best_score}")
            return best_model
        except Exception as e:
            logger.warning(f"Adaptive routing failed, using fallback {fallback}: {e}")
            return fallback
