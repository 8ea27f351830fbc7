"""
Runtime configuration.

Credentials and tuning knobs are read from the environment (and an optional
.env file) once, into explicit objects that are passed to each provider
adapter's constructor. Adapters never consult the environment themselves.

Environment configuration:
- OPENAI_API_KEY / OPENAI_API_BASE / OPENAI_MODEL / OPENAI_STRUCTURED_MODEL
- GEMINI_API_KEY / GEMINI_API_BASE / GEMINI_MODEL
- PERPLEXITY_API_KEY / PERPLEXITY_API_BASE / PERPLEXITY_MODEL
- LLM_TIMEOUT_SECONDS: per-request HTTP timeout (default: 30.0)
- EXTRACTION_MAX_ATTEMPTS / EXTRACTION_RETRY_DELAY_SECONDS (default: 10 / 0.5)
- ORCHESTRATION_MAX_ATTEMPTS (default: 10)
- SATURN_ANSWER_TIMEOUT_SECONDS: overall deadline per answer (default: none)
- LOG_LEVEL / LOG_JSON
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_OPENAI_API_BASE = "https://api.openai.com/v1"
DEFAULT_GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_PERPLEXITY_API_BASE = "https://api.perplexity.ai"

DEFAULT_OPENAI_MODEL = "gpt-4o"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_PERPLEXITY_MODEL = "sonar"


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry parameters for a single loop."""

    max_attempts: int
    delay_seconds: float = 0.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must be non-negative")


EXTRACTION_RETRY_POLICY = RetryPolicy(max_attempts=10, delay_seconds=0.5)
ORCHESTRATION_RETRY_POLICY = RetryPolicy(max_attempts=10, delay_seconds=0.0)


class ProviderConfig(BaseModel):
    """Connection settings for one external text-generation provider."""

    name: str
    api_key: Optional[str] = Field(None, description="Bearer token / API key")
    model: str
    base_url: str
    timeout_seconds: float = Field(30.0, gt=0)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class Settings(BaseModel):
    """Complete runtime configuration for the orchestrator and front ends."""

    openai: ProviderConfig
    openai_structured: ProviderConfig
    gemini: ProviderConfig
    perplexity: ProviderConfig
    extraction_max_attempts: int = Field(10, ge=1)
    extraction_retry_delay_seconds: float = Field(0.5, ge=0)
    orchestration_max_attempts: int = Field(10, ge=1)
    answer_timeout_seconds: Optional[float] = Field(None, gt=0)
    log_level: str = "INFO"
    log_json: bool = True

    @property
    def extraction_retry(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.extraction_max_attempts,
            delay_seconds=self.extraction_retry_delay_seconds,
        )

    @property
    def orchestration_retry(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.orchestration_max_attempts)


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Build Settings from the environment.

    A .env file is loaded first (``env_file`` if given, otherwise the nearest
    one found by python-dotenv); variables already set in the process
    environment win.
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    timeout = float(os.getenv("LLM_TIMEOUT_SECONDS", "30.0") or "30.0")
    openai_key = os.getenv("OPENAI_API_KEY")
    openai_base = os.getenv("OPENAI_API_BASE", DEFAULT_OPENAI_API_BASE)

    return Settings(
        openai=ProviderConfig(
            name="openai",
            api_key=openai_key,
            model=os.getenv("OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
            base_url=openai_base,
            timeout_seconds=timeout,
        ),
        openai_structured=ProviderConfig(
            name="openai_structured",
            api_key=openai_key,
            model=os.getenv(
                "OPENAI_STRUCTURED_MODEL",
                os.getenv("OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
            ),
            base_url=openai_base,
            timeout_seconds=timeout,
        ),
        gemini=ProviderConfig(
            name="gemini",
            api_key=os.getenv("GEMINI_API_KEY"),
            model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            base_url=os.getenv("GEMINI_API_BASE", DEFAULT_GEMINI_API_BASE),
            timeout_seconds=timeout,
        ),
        perplexity=ProviderConfig(
            name="perplexity",
            api_key=os.getenv("PERPLEXITY_API_KEY"),
            model=os.getenv("PERPLEXITY_MODEL", DEFAULT_PERPLEXITY_MODEL),
            base_url=os.getenv("PERPLEXITY_API_BASE", DEFAULT_PERPLEXITY_API_BASE),
            timeout_seconds=timeout,
        ),
        extraction_max_attempts=int(os.getenv("EXTRACTION_MAX_ATTEMPTS", "10") or "10"),
        extraction_retry_delay_seconds=float(
            os.getenv("EXTRACTION_RETRY_DELAY_SECONDS", "0.5") or "0.5"
        ),
        orchestration_max_attempts=int(
            os.getenv("ORCHESTRATION_MAX_ATTEMPTS", "10") or "10"
        ),
        answer_timeout_seconds=_optional_float("SATURN_ANSWER_TIMEOUT_SECONDS"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "true").lower() == "true",
    )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Global singleton accessor; the environment is read on first use only."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
