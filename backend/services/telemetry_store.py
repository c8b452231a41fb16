"""
Telemetry Store - In-memory ring buffer of orchestration records.

Holds the most recent TELEMETRY_CAPACITY records, newest first. The store is
created once in the application lifespan and handed to the orchestrator,
the adaptive router and the telemetry endpoints through app.state.

record() is the only mutator. Prepend, eviction and subscriber notification
happen under one lock, so concurrent writers cannot interleave and the
buffer never exceeds its capacity.

Subscribers choose their payload when subscribing:
    store.subscribe(handler)                 # handler(record_dict)
    store.subscribe(handler, snapshot=True)  # handler([record_dict, ...])
"""

import logging
import time
import uuid
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime
from threading import RLock
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

TELEMETRY_CAPACITY = 100

STEP_MODEL = "model"
STEP_IMAGE = "image"


@dataclass(frozen=True)
class ExecutionStep:
    """One executed (or attempted) orchestration step."""

    step: str  # "model" or "image"
    model: str
    duration_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return {"step": self.step, "model": self.model, "durationMs": self.duration_ms}


@dataclass(frozen=True)
class TelemetryRecord:
    """Immutable summary of one completed or failed orchestration."""

    composite: bool
    models_used: Tuple[str, ...]
    total_duration_ms: int
    execution_trace: Tuple[ExecutionStep, ...]
    text_length: Optional[int] = None
    image_generated: bool = False
    error: bool = False
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))

    @property
    def intent(self) -> str:
        return "composite" if self.composite else "single"

    def to_dict(self) -> Dict[str, Any]:
        """Wire format used by the API and the SSE stream."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "intent": self.intent,
            "composite": self.composite,
            "modelsUsed": list(self.models_used),
            "totalDurationMs": self.total_duration_ms,
            "executionTrace": [step.to_dict() for step in self.execution_trace],
            "textLength": self.text_length,
            "imageGenerated": self.image_generated,
            "error": self.error,
        }


@dataclass(eq=False)
class _Subscription:
    handler: Callable[[Any], None]
    snapshot: bool


class TelemetryStore:
    """Bounded, newest-first buffer of TelemetryRecords with change notification."""

    def __init__(self, capacity: int = TELEMETRY_CAPACITY):
        # appendleft on a bounded deque drops from the right, i.e. the oldest
        self._records: deque = deque(maxlen=capacity)
        self._subscribers: List[_Subscription] = []
        self._lock = RLock()  # handlers may read the store while being notified
        self.capacity = capacity

    def record(self, entry: TelemetryRecord) -> None:
        """Prepend a record, evict past capacity, notify subscribers."""
        with self._lock:
            self._records.appendleft(entry)
            snapshot = None
            for sub in list(self._subscribers):
                if sub.snapshot:
                    if snapshot is None:
                        snapshot = [r.to_dict() for r in self._records]
                    payload = snapshot
                else:
                    payload = entry.to_dict()
                try:
                    sub.handler(payload)
                except Exception as e:
                    logger.warning(f"Telemetry subscriber failed: {e}")

    def get_all(self) -> List[TelemetryRecord]:
        """Return a copy of all records, newest first."""
        with self._lock:
            return list(self._records)

    def subscribe(self, handler: Callable[[Any], None], snapshot: bool = False) -> Callable[[], None]:
        """Register a handler; returns an idempotent unsubscribe callable."""
        sub = _Subscription(handler=handler, snapshot=snapshot)
        with self._lock:
            self._subscribers.append(sub)

        def unsubscribe() -> None:
            with self._lock:
                if sub in self._subscribers:
                    self._subscribers.remove(sub)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def summary(self) -> Dict[str, Any]:
        return summarize_records(self.get_all())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def summarize_records(records: Sequence[TelemetryRecord]) -> Dict[str, Any]:
    """Aggregate dashboard figures from a list of records.

    Returns:
        totalRequests, compositeCount, imageCount, errorCount,
        avgLatencyMs (rounded, 0 when empty), modelUsage {model: uses}
        and timeline {"HH:00": requests} in local time.
    """
    total = len(records)
    model_usage: Counter = Counter()
    timeline: Dict[str, int] = {}

    for record in records:
        model_usage.update(record.models_used)
        hour = datetime.fromtimestamp(record.timestamp / 1000).strftime("%H:00")
        timeline[hour] = timeline.get(hour, 0) + 1

    return {
        "totalRequests": total,
        "compositeCount": sum(1 for r in records if r.composite),
        "imageCount": sum(1 for r in records if r.image_generated),
        "errorCount": sum(1 for r in records if r.error),
        "avgLatencyMs": round(sum(r.total_duration_ms for r in records) / total) if total else 0,
        "modelUsage": dict(model_usage),
        "timeline": timeline,
    }
