"""
Unit tests for environment-driven configuration.
"""
import pytest
from pydantic import ValidationError

from saturn.core import config as config_module
from saturn.core.config import (
    EXTRACTION_RETRY_POLICY,
    ORCHESTRATION_RETRY_POLICY,
    ProviderConfig,
    RetryPolicy,
    get_settings,
    load_settings,
)

ENV_VARS = [
    "OPENAI_API_KEY",
    "OPENAI_API_BASE",
    "OPENAI_MODEL",
    "OPENAI_STRUCTURED_MODEL",
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "PERPLEXITY_API_KEY",
    "PERPLEXITY_MODEL",
    "LLM_TIMEOUT_SECONDS",
    "EXTRACTION_MAX_ATTEMPTS",
    "EXTRACTION_RETRY_DELAY_SECONDS",
    "ORCHESTRATION_MAX_ATTEMPTS",
    "SATURN_ANSWER_TIMEOUT_SECONDS",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate from the developer's environment and any .env file."""
    for name in ENV_VARS:
        # setenv first so monkeypatch also undoes values loaded from .env
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    empty_env = tmp_path / ".env"
    empty_env.write_text("")
    return empty_env


def test_default_retry_policies():
    assert EXTRACTION_RETRY_POLICY == RetryPolicy(max_attempts=10, delay_seconds=0.5)
    assert ORCHESTRATION_RETRY_POLICY.max_attempts == 10
    assert ORCHESTRATION_RETRY_POLICY is not EXTRACTION_RETRY_POLICY


def test_retry_policy_validation():
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=1, delay_seconds=-1)


def test_load_settings_defaults(clean_env):
    settings = load_settings(clean_env)

    assert settings.openai.api_key is None
    assert not settings.openai.is_configured
    assert settings.openai.model == "gpt-4o"
    assert settings.openai.base_url == "https://api.openai.com/v1"
    assert settings.extraction_retry == RetryPolicy(max_attempts=10, delay_seconds=0.5)
    assert settings.orchestration_retry == RetryPolicy(max_attempts=10)
    assert settings.answer_timeout_seconds is None


def test_load_settings_reads_environment(clean_env, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("GEMINI_API_KEY", "g-test")
    monkeypatch.setenv("PERPLEXITY_API_KEY", "p-test")
    monkeypatch.setenv("OPENAI_STRUCTURED_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "12.5")
    monkeypatch.setenv("EXTRACTION_MAX_ATTEMPTS", "4")
    monkeypatch.setenv("SATURN_ANSWER_TIMEOUT_SECONDS", "90")

    settings = load_settings(clean_env)

    assert settings.openai.api_key == "sk-test"
    assert settings.openai_structured.api_key == "sk-test"
    assert settings.openai_structured.model == "gpt-4o-mini"
    assert settings.gemini.is_configured
    assert settings.perplexity.api_key == "p-test"
    assert settings.perplexity.timeout_seconds == 12.5
    assert settings.extraction_retry.max_attempts == 4
    assert settings.answer_timeout_seconds == 90.0


def test_load_settings_reads_dotenv_file(clean_env):
    clean_env.write_text("GEMINI_API_KEY=from-dotenv\n")

    settings = load_settings(clean_env)

    assert settings.gemini.api_key == "from-dotenv"


def test_provider_config_rejects_non_positive_timeout():
    with pytest.raises(ValidationError):
        ProviderConfig(name="x", model="m", base_url="https://x", timeout_seconds=0)


def test_get_settings_reads_environment_once(clean_env, monkeypatch):
    calls = []

    def counting_load_settings():
        calls.append(1)
        return load_settings(clean_env)

    monkeypatch.setattr(config_module, "_settings", None)
    monkeypatch.setattr(config_module, "load_settings", counting_load_settings)

    first = get_settings()
    second = get_settings()

    assert first is second
    assert len(calls) == 1
