"""
Runtime Configuration for MelonScope.

Provides a singleton RuntimeConfig read from the environment at startup.

Usage:
    from config import runtime_config
    temperature = runtime_config.temperature
    params = runtime_config.get_llm_params()

Credentials are never stored on the config object. They are read from the
environment at request time via get_credential().
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Any, Optional

DEFAULT_IMAGE_MODEL = "stabilityai/stable-diffusion-xl-base-1.0"
DEFAULT_IMAGE_API_URL = "https://api.bytez.com/models/v2"


def _first_env(*keys: str, default: str) -> str:
    """Return the first non-empty environment value from keys, else default."""
    for key in keys:
        value = os.environ.get(key, "").strip()
        if value:
            return value
    return default


@dataclass
class RuntimeConfig:
    """
    Singleton configuration for model, image and telemetry parameters.

    All values come from environment variables, with defaults.
    """

    # Model parameters (ChatParams defaults)
    temperature: float = field(default_factory=lambda: float(os.environ.get("LLM_TEMPERATURE", "0.7")))
    max_output_tokens: int = field(
        default_factory=lambda: int(os.environ.get("LLM_MAX_OUTPUT", "4096"))
    )  # Passed upstream as max_tokens

    # Upstream HTTP timeouts (seconds)
    llm_timeout: float = field(default_factory=lambda: float(os.environ.get("LLM_TIMEOUT", "180")))
    image_timeout: float = field(default_factory=lambda: float(os.environ.get("IMAGE_TIMEOUT", "120")))

    # Image generation (composite second step)
    image_model: str = field(
        default_factory=lambda: _first_env("IMAGE_MODEL", "BYTEZ_IMAGE_MODEL", default=DEFAULT_IMAGE_MODEL)
    )
    image_api_url: str = field(
        default_factory=lambda: _first_env("IMAGE_API_URL", default=DEFAULT_IMAGE_API_URL).rstrip("/")
    )

    # Optional base URL override for the OpenAI provider
    openai_base_url: str = field(default_factory=lambda: os.environ.get("OPENAI_BASE_URL", "").strip())

    # Telemetry SSE keepalive interval
    telemetry_keepalive_s: float = field(
        default_factory=lambda: float(os.environ.get("TELEMETRY_KEEPALIVE_S", "15"))
    )

    log_level: str = field(default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper())

    def get_llm_params(self) -> Dict[str, Any]:
        """Get default ChatParams values."""
        return {
            "temperature": self.temperature,
            "max_tokens": self.max_output_tokens,
        }

    def get_credential(self, env_var: str) -> Optional[str]:
        """Read a provider credential from the environment (None when unset or blank)."""
        value = os.environ.get(env_var, "").strip()
        return value or None

    def to_dict(self) -> Dict[str, Any]:
        """Export current config as dict."""
        from dataclasses import fields as dataclass_fields

        return {field_info.name: getattr(self, field_info.name) for field_info in dataclass_fields(self)}




runtime_config = RuntimeConfig()
