"""
MelonScope Chat Streaming - Server-Sent Events helpers

Shared by the chat stream and the telemetry stream.
"""

import json
from typing import Any, Optional

# Disable proxy buffering so events reach the browser as they are produced
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

SSE_MEDIA_TYPE = "text/event-stream"


def format_sse(data: Any, event: Optional[str] = None) -> str:
    """Encode one SSE event.

    Args:
        data: JSON-serializable payload
        event: Optional event name (omitted lines default to "message")
    """
    prefix = f"event: {event}\n" if event else ""
    return f"{prefix}data: {json.dumps(data)}\n\n"


def format_sse_comment(text: str) -> str:
    """Comment line; ignored by EventSource, keeps idle connections open."""
    return f": {text}\n\n"
