"""Centralized LLM configuration - single source of truth.

Provider selection, model ids, endpoint and sampling defaults for the plan
generation pipeline. Values are read once from the environment (and an optional
.env file) at startup and are read-only afterwards.

Provider "together" is any OpenAI-compatible chat-completions endpoint
(Together by default). Provider "gemini" goes through the google-genai SDK.
"""

import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


class ProviderId(str, Enum):
    """Identifiers of the supported LLM backends."""

    TOGETHER = "together"
    GEMINI = "gemini"


# Default endpoint for the OpenAI-compatible provider
DEFAULT_BASE_URL = "https://api.together.xyz/v1"
DEFAULT_PROVIDER = ProviderId.GEMINI

DEFAULT_TOGETHER_MODEL = "mistralai/Mixtral-8x7B-Instruct-v0.1"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"

# Sampling defaults shared by every category
DEFAULT_MAX_OUTPUT_TOKENS = 8192
DEFAULT_TEMPERATURE = 0.7
DEFAULT_REQUEST_TIMEOUT_SECONDS = 120.0

# Provider A accepts the full sampling set
TOGETHER_TOP_P = 0.7
TOGETHER_TOP_K = 50
TOGETHER_REPETITION_PENALTY = 1.0

# Provider B runs with fixed nucleus/top-k values
GEMINI_TOP_P = 0.8
GEMINI_TOP_K = 40

# Gemini API keys issued by Google AI Studio
GOOGLE_API_KEY_PREFIX = "AIza"
GOOGLE_API_KEY_MIN_LENGTH = 30


@dataclass(frozen=True)
class ProviderSettings:
    """Process-wide provider configuration."""

    provider: ProviderId
    together_model: str
    gemini_model: str
    base_url: str
    together_api_key: Optional[str]
    google_api_key: Optional[str]
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    temperature: float = DEFAULT_TEMPERATURE

    @property
    def model_id(self) -> str:
        """Model id for the active provider."""
        if self.provider == ProviderId.GEMINI:
            return self.gemini_model
        return self.together_model


def parse_provider_id(value: Optional[str]) -> ProviderId:
    """Map an environment value to a ProviderId, defaulting to Gemini.

    Args:
        value: Raw value such as "together", "Gemini" or None

    Returns:
        Matching ProviderId

    Raises:
        ValueError: If the value names an unknown provider
    """
    if not value:
        return DEFAULT_PROVIDER
    try:
        return ProviderId(value.strip().lower())
    except ValueError as exc:
        choices = ", ".join(p.value for p in ProviderId)
        raise ValueError(f"Unknown AI provider '{value}' (expected one of: {choices})") from exc


def _read_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


@lru_cache(maxsize=1)
def load_provider_settings() -> ProviderSettings:
    """Load provider settings from the environment once per process."""
    load_dotenv()

    return ProviderSettings(
        provider=parse_provider_id(os.getenv("AI_PROVIDER")),
        together_model=os.getenv("AI_MODEL", DEFAULT_TOGETHER_MODEL),
        gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
        base_url=os.getenv("AI_BASE_URL") or DEFAULT_BASE_URL,
        together_api_key=os.getenv("OPENAI_API_KEY"),
        google_api_key=os.getenv("GOOGLE_API_KEY"),
        request_timeout=_read_float("AI_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT_SECONDS),
        max_output_tokens=int(_read_float("AI_MAX_OUTPUT_TOKENS", DEFAULT_MAX_OUTPUT_TOKENS)),
        temperature=_read_float("AI_TEMPERATURE", DEFAULT_TEMPERATURE),
    )
