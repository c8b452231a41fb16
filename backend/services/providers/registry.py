"""
Provider registry - the closed allow-list of upstream LLM APIs.

Maps a provider id to its display name, credential env var, adapter class
and default base URL. Anything not listed here is rejected before a
network call is made.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Type

import httpx

from errors import ErrorCode, ValidationError

from .base import ProviderAdapter
from .bytez import BYTEZ_BASE_URL, BytezAdapter
from .claude import ClaudeAdapter
from .gemini import GeminiAdapter
from .openai_compat import OPENAI_BASE_URL, OpenAICompatibleAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderSpec:
    provider_id: str
    name: str
    env_var: str
    adapter_cls: Type[ProviderAdapter]
    base_url: Optional[str] = None


PROVIDER_REGISTRY: Dict[str, ProviderSpec] = {
    "bytez": ProviderSpec("bytez", "Bytez", "BYTEZ_API_KEY", BytezAdapter, BYTEZ_BASE_URL),
    "openai": ProviderSpec("openai", "OpenAI", "OPENAI_API_KEY", OpenAICompatibleAdapter, OPENAI_BASE_URL),
    "claude": ProviderSpec("claude", "Claude", "ANTHROPIC_API_KEY", ClaudeAdapter),
    "gemini": ProviderSpec("gemini", "Gemini", "GEMINI_API_KEY", GeminiAdapter),
    "moonshot": ProviderSpec(
        "moonshot", "Moonshot", "MOONSHOT_API_KEY", OpenAICompatibleAdapter, "https://api.moonshot.cn/v1"
    ),
    "deepseek": ProviderSpec(
        "deepseek", "DeepSeek", "DEEPSEEK_API_KEY", OpenAICompatibleAdapter, "https://api.deepseek.com/v1"
    ),
    "groq": ProviderSpec(
        "groq", "Groq", "GROQ_API_KEY", OpenAICompatibleAdapter, "https://api.groq.com/openai/v1"
    ),
    "together": ProviderSpec(
        "together", "Together AI", "TOGETHER_API_KEY", OpenAICompatibleAdapter, "https://api.together.xyz/v1"
    ),
}

DEFAULT_PROVIDER = "bytez"


def get_provider_spec(provider_id: str) -> ProviderSpec:
    """Look up a provider, raising ValidationError for ids outside the allow-list."""
    spec = PROVIDER_REGISTRY.get(provider_id)
    if spec is None:
        raise ValidationError(
            f"Unknown provider: {provider_id}",
            details=f"Supported providers: {', '.join(sorted(PROVIDER_REGISTRY))}",
            parameter="provider",
            received=provider_id,
            code=ErrorCode.VALIDATION_UNKNOWN_PROVIDER,
        )
    return spec


def create_provider(
    provider_id: str,
    api_key: str,
    base_url: Optional[str] = None,
    timeout: float = 180.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ProviderAdapter:
    """Build the adapter for a provider id.

    Args:
        provider_id: One of PROVIDER_REGISTRY's keys
        api_key: Credential for the provider
        base_url: Optional base URL override (e.g. a self-hosted OpenAI proxy)
        timeout: Request timeout in seconds
        transport: Optional httpx transport for tests

    Raises:
        ValidationError: Unknown provider id
    """
    spec = get_provider_spec(provider_id)
    logger.debug(f"Creating {spec.name} adapter")
    return spec.adapter_cls(
        api_key,
        name=spec.name,
        base_url=base_url or spec.base_url,
        timeout=timeout,
        transport=transport,
    )
