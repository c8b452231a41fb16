"""
Claude adapter - Anthropic Messages API over httpx.

The first system message is lifted into the top-level "system" field;
the remaining turns are sent as-is. Streaming relays only
content_block_delta text events.
"""

from typing import Any, Optional, Sequence

from .base import BufferedReply, ChatParams, Message, ProviderAdapter, ProviderReply

ANTHROPIC_VERSION = "2023-06-01"


def _delta_text(event: Any) -> Optional[str]:
    if isinstance(event, dict) and event.get("type") == "content_block_delta":
        return (event.get("delta") or {}).get("text")
    return None


class ClaudeAdapter(ProviderAdapter):
    name = "Claude"
    default_base_url = "https://api.anthropic.com/v1"

    async def send(
        self,
        model: str,
        messages: Sequence[Message],
        params: ChatParams,
        stream: bool,
    ) -> ProviderReply:
        system = next((m.content for m in messages if m.role == "system"), None)
        payload = {
            "model": model,
            "max_tokens": params.max_tokens,
            "temperature": params.temperature,
            "messages": [m.to_dict() for m in messages if m.role != "system"],
            "stream": stream,
        }
        if system:
            payload["system"] = system

        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }
        url = f"{self.base_url}/messages"

        if stream:
            return await self._stream_sse(url, headers, payload, _delta_text)

        data = self._require_object(await self._post_json(url, headers, payload))
        content = data.get("content")
        first = content[0] if isinstance(content, list) and content else {}
        return BufferedReply(first.get("text", "") if isinstance(first, dict) else "")
