"""
Bytez adapter - hosted open-weight models over httpx.

Bytez only answers with complete responses. When the caller asks for a
stream, the full text is re-emitted as a single SSE delta followed by [DONE].

Response shape: {"error": str | null, "output": str | [output, meta] | {...}}
"""

import json
from typing import Any, AsyncIterator, Sequence
from urllib.parse import quote

from errors import UpstreamError

from .base import (
    SSE_DONE,
    BufferedReply,
    ChatParams,
    Message,
    ProviderAdapter,
    ProviderReply,
    StreamedReply,
    messages_to_dicts,
    sse_delta,
)

BYTEZ_BASE_URL = "https://api.bytez.com/models/v2"


def model_url(base_url: str, model: str) -> str:
    """Bytez addresses models by their url-encoded id, e.g. Qwen%2FQwen2.5-7B-Instruct."""
    return f"{base_url}/{quote(model, safe='')}"


def _output_text(output: Any) -> str:
    # Tuple format: [output, metadata]
    if isinstance(output, list):
        output = output[0] if output else None

    if isinstance(output, str):
        return output
    if isinstance(output, dict):
        if "content" in output:
            return str(output["content"])
        if "text" in output:
            return str(output["text"])
        return json.dumps(output)
    if output is None:
        return "No response"
    return str(output)


async def _single_event(text: str) -> AsyncIterator[bytes]:
    yield sse_delta(text)
    yield SSE_DONE


class BytezAdapter(ProviderAdapter):
    name = "Bytez"
    default_base_url = BYTEZ_BASE_URL

    async def send(
        self,
        model: str,
        messages: Sequence[Message],
        params: ChatParams,
        stream: bool,
    ) -> ProviderReply:
        payload = {
            "messages": messages_to_dicts(messages),
            "params": {
                "temperature": params.temperature,
                "max_length": params.max_tokens,
            },
        }
        data = self._require_object(
            await self._post_json(
                model_url(self.base_url, model),
                {"Authorization": self.api_key},
                payload,
            )
        )

        if data.get("error"):
            raise UpstreamError(
                f"Bytez error: {data['error']}",
                service="bytez",
                error_type="payload",
            )

        text = _output_text(data.get("output"))
        if stream:
            return StreamedReply(_single_event(text))
        return BufferedReply(text)
