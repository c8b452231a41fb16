"""
Provider adapters - one uniform send() over every supported LLM API.

Usage:
    from services.providers import create_provider, ChatParams, Message

    provider = create_provider("claude", api_key)
    reply = await provider.send(model, [Message("user", "hi")], ChatParams(), stream=False)
"""

from .base import (
    SSE_DONE,
    VALID_ROLES,
    BufferedReply,
    ChatParams,
    Message,
    ProviderAdapter,
    ProviderReply,
    StreamedReply,
    sse_delta,
)
from .bytez import BytezAdapter
from .claude import ClaudeAdapter
from .gemini import GeminiAdapter
from .openai_compat import OpenAICompatibleAdapter
from .registry import (
    DEFAULT_PROVIDER,
    PROVIDER_REGISTRY,
    ProviderSpec,
    create_provider,
    get_provider_spec,
)

__all__ = [
    "SSE_DONE",
    "VALID_ROLES",
    "BufferedReply",
    "ChatParams",
    "Message",
    "ProviderAdapter",
    "ProviderReply",
    "StreamedReply",
    "sse_delta",
    "BytezAdapter",
    "ClaudeAdapter",
    "GeminiAdapter",
    "OpenAICompatibleAdapter",
    "DEFAULT_PROVIDER",
    "PROVIDER_REGISTRY",
    "ProviderSpec",
    "create_provider",
    "get_provider_spec",
]
