from __future__ import annotations

import pytest
from pydantic import ValidationError

from chat_relay.config.app_config import AppConfig
from chat_relay.config.llm_config import GROQ_BASE_URL, LlmConfig


def test_llm_config_defaults_target_groq() -> None:
    config = LlmConfig(api_key="key")
    assert config.base_url == GROQ_BASE_URL
    assert config.model == "llama-3.3-70b-versatile"
    assert config.timeout == 30


def test_llm_config_reads_groq_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LLM_API_KEY", raising=False)
    monkeypatch.setenv("GROQ_API_KEY", "groq-key")
    assert LlmConfig().api_key == "groq-key"


@pytest.mark.parametrize(
    "overrides",
    [
        {"temperature": 2.5},
        {"timeout": 0},
        {"max_tokens": 0},
        {"api_key": "   "},
    ],
)
def test_llm_config_rejects_invalid_values(overrides: dict[str, object]) -> None:
    values = {"api_key": "key", **overrides}
    with pytest.raises(ValidationError):
        LlmConfig(**values)


def test_app_config_normalises_log_level() -> None:
    assert AppConfig(log_level="debug").log_level == "DEBUG"


def test_app_config_rejects_unknown_environment() -> None:
    with pytest.raises(ValidationError):
        AppConfig(app_env="qa")


def test_app_config_splits_cors_origins() -> None:
    config = AppConfig(cors_origins="http://localhost:3000, https://chat.example.com,")
    assert config.cors_origin_list == ["http://localhost:3000", "https://chat.example.com"]


def test_trust_response_format_defaults_off() -> None:
    assert AppConfig().trust_response_format is False
