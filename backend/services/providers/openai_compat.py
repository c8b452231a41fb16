"""
OpenAI-compatible adapter - wraps the OpenAI SDK.

Serves OpenAI itself and every vendor exposing the same
/chat/completions API (Moonshot, DeepSeek, Groq, Together AI); only the
base URL and display name differ.

Key translations:
- Messages: Message dataclasses -> {"role", "content"} dicts
- Options: ChatParams.temperature / max_tokens passed through
- Streaming: ChatCompletionChunk deltas -> uniform SSE delta events
- Errors: APIStatusError -> "<Name> API error: <status> - <body>"
"""

import logging
from typing import AsyncIterator, Optional, Sequence

import httpx
from openai import APIConnectionError, APIStatusError, AsyncOpenAI

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

logger = logging.getLogger(__name__)

OPENAI_BASE_URL = "https://api.openai.com/v1"


class OpenAICompatibleAdapter(ProviderAdapter):
    """Wraps the OpenAI SDK pointed at any OpenAI-compatible endpoint."""

    name = "OpenAI"
    default_base_url = OPENAI_BASE_URL

    def __init__(
        self,
        api_key: str,
        name: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 180.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(api_key, name=name, base_url=base_url, timeout=timeout, transport=transport)
        http_client = httpx.AsyncClient(transport=transport, timeout=timeout) if transport else None
        self._openai = AsyncOpenAI(
            api_key=api_key,
            base_url=self.base_url,
            timeout=timeout,
            max_retries=0,  # a failed upstream call fails the request
            http_client=http_client,
        )

    async def send(
        self,
        model: str,
        messages: Sequence[Message],
        params: ChatParams,
        stream: bool,
    ) -> ProviderReply:
        kwargs = {
            "model": model,
            "messages": messages_to_dicts(messages),
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
        }

        try:
            if stream:
                completion_stream = await self._openai.chat.completions.create(stream=True, **kwargs)
                return StreamedReply(self._relay(completion_stream))

            response = await self._openai.chat.completions.create(stream=False, **kwargs)
        except APIStatusError as e:
            raise self._api_error(e.status_code, e.response.text) from e
        except APIConnectionError as e:
            raise self._network_error(e) from e

        if not response.choices:
            return BufferedReply("")
        return BufferedReply(response.choices[0].message.content or "")

    async def _relay(self, completion_stream) -> AsyncIterator[bytes]:
        """Translate SDK chunks into uniform SSE bytes."""
        try:
            async for chunk in completion_stream:
                delta = chunk.choices[0].delta if chunk.choices else None
                if delta and delta.content:
                    yield sse_delta(delta.content)
            yield SSE_DONE
        finally:
            await completion_stream.close()
