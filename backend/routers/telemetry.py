"""
MelonScope Telemetry Router

GET /api/telemetry          records (newest first) plus dashboard summary
GET /api/telemetry/stream   live Server-Sent Events feed

Stream protocol:
    event: ready\\ndata: {}\\n\\n            sent once on connect
    data: <record json>\\n\\n                 per new record (or the full
                                            snapshot list with ?snapshot=true)
    : keepalive\\n\\n                       while idle
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from config import runtime_config
from services.telemetry_store import TelemetryStore, summarize_records

from .chat_streaming import SSE_HEADERS, SSE_MEDIA_TYPE, format_sse, format_sse_comment
from .dependencies import get_telemetry_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/telemetry")


# Frames buffered per connection before the oldest is dropped
STREAM_QUEUE_SIZE = 100


def _enqueue_latest(queue: asyncio.Queue, payload: Any) -> None:
    """put_nowait that drops the oldest frame when a slow reader fills the queue."""
    if queue.full():
        queue.get_nowait()
        logger.warning("Telemetry stream reader is lagging; dropped oldest frame")
    queue.put_nowait(payload)


async def telemetry_events(
    store: TelemetryStore,
    request: Optional[Request] = None,
    snapshot: bool = False,
    keepalive: float = 15.0,
    queue_size: int = STREAM_QUEUE_SIZE,
) -> AsyncIterator[str]:
    """Yield SSE frames for every record added to the store.

    The store notifies synchronously from whichever thread records, so the
    handler only hands the payload to this loop. The subscription is
    released when the generator is closed or cancelled.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)

    def on_record(payload: Any) -> None:
        loop.call_soon_threadsafe(_enqueue_latest, queue, payload)

    unsubscribe = store.subscribe(on_record, snapshot=snapshot)
    logger.info(f"Telemetry stream opened ({store.subscriber_count} subscriber(s))")
    try:
        yield format_sse({}, event="ready")
        while True:
            if request is not None and await request.is_disconnected():
                break
            try:
                payload = await asyncio.wait_for(queue.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                yield format_sse_comment("keepalive")
                continue
            yield format_sse(payload)
    finally:
        unsubscribe()
        logger.info("Telemetry stream closed")


@router.get("")
async def get_telemetry(store: TelemetryStore = Depends(get_telemetry_store)):
    """All records newest first, plus aggregate figures for the dashboard."""
    records = store.get_all()
    return {
        "records": [r.to_dict() for r in records],
        "summary": summarize_records(records),
    }


@router.get("/stream")
async def stream_telemetry(
    request: Request,
    snapshot: bool = False,
    store: TelemetryStore = Depends(get_telemetry_store),
):
    return StreamingResponse(
        telemetry_events(store, request, snapshot=snapshot, keepalive=runtime_config.telemetry_keepalive_s),
        media_type=SSE_MEDIA_TYPE,
        headers=SSE_HEADERS,
    )
