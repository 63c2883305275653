"""Configuration defaults and environment parsing."""

from __future__ import annotations

import pytest

import config as config_module


def test_defaults_use_rule_based_analyzer() -> None:
    cfg = config_module.reset_config()

    assert cfg.ANALYZER_BACKEND == "rules"
    assert cfg.active_backend == "rules"
    assert cfg.OPENAI_MODEL == "gpt-3.5-turbo"
    assert cfg.LLM_MAX_RETRIES == 3
    assert cfg.LLM_BACKOFF_SECONDS == 1.0
    assert cfg.HISTORY_LIMIT == 10
    assert cfg.ALLOWED_ORIGINS == ["*"]


def test_openai_backend_requires_a_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANALYZER_BACKEND", "OpenAI")
    cfg = config_module.reset_config()

    assert cfg.ANALYZER_BACKEND == "openai"
    assert cfg.active_backend == "rules"

    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    assert config_module.reset_config().active_backend == "openai"


def test_unknown_backend_falls_back_to_rules(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANALYZER_BACKEND", "bert")

    assert config_module.reset_config().ANALYZER_BACKEND == "rules"


def test_malformed_numbers_keep_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_MAX_RETRIES", "three")
    monkeypatch.setenv("LLM_BACKOFF_SECONDS", "fast")
    monkeypatch.setenv("HISTORY_LIMIT", "25")
    cfg = config_module.reset_config()

    assert cfg.LLM_MAX_RETRIES == 3
    assert cfg.LLM_BACKOFF_SECONDS == 1.0
    assert cfg.HISTORY_LIMIT == 25


def test_allowed_origins_are_split(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.example, https://b.example,")

    assert config_module.reset_config().ALLOWED_ORIGINS == ["https://a.example", "https://b.example"]


def test_update_config_rejects_unknown_keys() -> None:
    cfg = config_module.update_config(HISTORY_LIMIT=5)
    assert cfg.HISTORY_LIMIT == 5
    assert config_module.get_config() is cfg

    with pytest.raises(AttributeError):
        config_module.update_config(NOT_A_SETTING=True)
