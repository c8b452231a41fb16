"""
Tests for RuntimeConfig.
"""

import pytest

from config import DEFAULT_IMAGE_API_URL, DEFAULT_IMAGE_MODEL, RuntimeConfig


class TestDefaults:
    def test_env_defaults(self, monkeypatch):
        for key in ("LLM_TEMPERATURE", "LLM_MAX_OUTPUT", "IMAGE_MODEL", "BYTEZ_IMAGE_MODEL", "IMAGE_API_URL"):
            monkeypatch.delenv(key, raising=False)
        config = RuntimeConfig()
        assert config.temperature == 0.7
        assert config.max_output_tokens == 4096
        assert config.image_model == DEFAULT_IMAGE_MODEL
        assert config.image_api_url == DEFAULT_IMAGE_API_URL

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("LLM_TEMPERATURE", "0.2")
        monkeypatch.setenv("IMAGE_MODEL", "custom/painter")
        monkeypatch.setenv("IMAGE_API_URL", "http://images.local/v2/")
        config = RuntimeConfig()
        assert config.temperature == 0.2
        assert config.image_model == "custom/painter"
        assert config.image_api_url == "http://images.local/v2"


class TestLLMParams:
    def test_llm_params(self):
        config = RuntimeConfig(temperature=0.5, max_output_tokens=100)
        assert config.get_llm_params() == {"temperature": 0.5, "max_tokens": 100}

    def test_bad_env_value_fails_fast(self, monkeypatch):
        monkeypatch.setenv("LLM_MAX_OUTPUT", "lots")
        with pytest.raises(ValueError):
            RuntimeConfig()


class TestCredentials:
    def test_get_credential(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "  key  ")
        assert RuntimeConfig().get_credential("GROQ_API_KEY") == "key"

    def test_blank_credential_is_none(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "   ")
        assert RuntimeConfig().get_credential("GROQ_API_KEY") is None

    def test_to_dict_has_no_secrets(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-secret")
        data = RuntimeConfig().to_dict()
        assert "sk-secret" not in str(data)
        assert {"temperature", "max_output_tokens", "image_model", "log_level"} <= set(data)
