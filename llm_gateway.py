"""Uniform completion interface over the supported LLM backends.

Two providers implement `CompletionProvider`:

- OpenAICompatibleProvider: chat-completions endpoint (Together by default)
  called with httpx, bearer auth, full sampling set.
- GeminiProvider: google-genai SDK, fixed top_p/top_k generation config.

Each `complete()` call performs exactly one outbound request. Retrying is the
job of ai_pipeline.AIRequestPipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from google import genai
from google.genai import types

from exceptions import EmptyResponseError, ProviderConfigurationError, TransportError
from llm_config import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_TEMPERATURE,
    GEMINI_TOP_K,
    GEMINI_TOP_P,
    GOOGLE_API_KEY_MIN_LENGTH,
    GOOGLE_API_KEY_PREFIX,
    ProviderId,
    ProviderSettings,
)
from observability import setup_structured_logger
from payload_access import get_list, get_path

logger = setup_structured_logger("fitplan.gateway")


@dataclass(frozen=True)
class CompletionRequest:
    """One prompt plus its sampling configuration; built fresh per call."""

    model_id: str
    prompt_text: str
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    repetition_penalty: Optional[float] = None


@dataclass(frozen=True)
class CompletionResult:
    """Generated text, opaque until sanitized."""

    text: str
    provider: str = ""
    model_id: str = ""


class CompletionProvider(ABC):
    """Capability shared by every backend: prompt + sampling config in, text out."""

    provider_id: ProviderId

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> CompletionResult:
        """Run one completion.

        Raises:
            TransportError: network failure or non-success status
            EmptyResponseError: response carried no text
        """


# ============================================================================
# Provider A: OpenAI-compatible chat completions
# ============================================================================


class OpenAICompatibleProvider(CompletionProvider):
    """Chat-completions backend reached over plain HTTP."""

    provider_id = ProviderId.TOGETHER

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ):
        if not api_key or not api_key.strip():
            raise ProviderConfigurationError(
                "OPENAI_API_KEY is not set for the chat-completions provider",
                provider=self.provider_id.value,
            )
        self._api_key = api_key.strip()
        self._endpoint = f"{base_url.rstrip('/')}/chat/completions"
        self._client = client
        self._timeout = timeout

    def build_payload(self, request: CompletionRequest) -> Dict[str, Any]:
        """Request body; optional sampling fields are sent only when set."""
        payload: Dict[str, Any] = {
            "model": request.model_id,
            "messages": [{"role": "user", "content": request.prompt_text}],
            "max_tokens": request.max_output_tokens,
            "temperature": request.temperature,
        }
        optional = {
            "top_p": request.top_p,
            "top_k": request.top_k,
            "repetition_penalty": request.repetition_penalty,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        return payload

    async def _post(self, client: httpx.AsyncClient, payload: Dict[str, Any]) -> httpx.Response:
        return await client.post(
            self._endpoint,
            json=payload,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=self._timeout,
        )

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        payload = self.build_payload(request)
        try:
            if self._client is not None:
                response = await self._post(self._client, payload)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._post(client, payload)
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Request to {self._endpoint} failed: {type(exc).__name__}: {exc}",
                provider=self.provider_id.value,
            ) from exc

        if not response.is_success:
            raise TransportError(
                f"Provider returned HTTP {response.status_code}: {response.text[:300]}",
                provider=self.provider_id.value,
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise EmptyResponseError(
                "Provider response body is not JSON", provider=self.provider_id.value
            ) from exc

        choices = get_list(body, "choices")
        text = get_path(choices[0], "message", "content") if choices else None
        if not isinstance(text, str) or not text.strip():
            raise EmptyResponseError("No response from AI", provider=self.provider_id.value)

        return CompletionResult(text=text, provider=self.provider_id.value, model_id=request.model_id)


# ============================================================================
# Provider B: Gemini via google-genai
# ============================================================================


def validate_google_api_key(api_key: Optional[str]) -> str:
    """Return the stripped key, or raise if it cannot be a Google AI Studio key."""
    key = (api_key or "").strip()
    if not key:
        raise ProviderConfigurationError(
            "GOOGLE_API_KEY is not set for the Gemini provider",
            provider=ProviderId.GEMINI.value,
        )
    if len(key) < GOOGLE_API_KEY_MIN_LENGTH or not key.startswith(GOOGLE_API_KEY_PREFIX):
        raise ProviderConfigurationError(
            f"GOOGLE_API_KEY looks malformed (expected '{GOOGLE_API_KEY_PREFIX}...' "
            f"with at least {GOOGLE_API_KEY_MIN_LENGTH} characters)",
            provider=ProviderId.GEMINI.value,
        )
    return key


def _describe_gemini_error(exc: Exception) -> str:
    message = str(exc)
    lowered = message.lower()
    if "api key" in lowered or "api_key" in lowered:
        return f"Invalid API key. Please check your Gemini API key configuration. ({message})"
    if "404" in message:
        return f"Model not found. Please check the Gemini model name. ({message})"
    if "403" in message:
        return f"Access denied. Please verify your API key permissions. ({message})"
    return f"Gemini API error: {message}"


class GeminiProvider(CompletionProvider):
    """Generative-content backend; request-level top_p/top_k/repetition penalty are not used."""

    provider_id = ProviderId.GEMINI

    def __init__(self, api_key: Optional[str], client: Optional[Any] = None):
        key = validate_google_api_key(api_key)
        self._client = client if client is not None else genai.Client(api_key=key)

    def build_config(self, request: CompletionRequest) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=request.temperature,
            max_output_tokens=request.max_output_tokens,
            top_p=GEMINI_TOP_P,
            top_k=GEMINI_TOP_K,
        )

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        contents = [
            types.Content(role="user", parts=[types.Part(text=request.prompt_text)])
        ]
        try:
            response = await self._client.aio.models.generate_content(
                model=request.model_id,
                contents=contents,
                config=self.build_config(request),
            )
        except Exception as exc:
            raise TransportError(
                _describe_gemini_error(exc),
                provider=self.provider_id.value,
                status_code=getattr(exc, "code", None),
            ) from exc

        text = getattr(response, "text", None)
        if not isinstance(text, str) or not text.strip():
            raise EmptyResponseError("Empty response from Gemini", provider=self.provider_id.value)

        return CompletionResult(text=text, provider=self.provider_id.value, model_id=request.model_id)


# ============================================================================
# Gateway
# ============================================================================


class ModelGateway:
    """Routes a completion request to the configured provider."""

    def __init__(self, providers: Dict[ProviderId, CompletionProvider]):
        self._providers = dict(providers)

    @classmethod
    def from_settings(cls, settings: ProviderSettings) -> "ModelGateway":
        """Build a gateway holding only the provider selected in `settings`.

        Raises:
            ProviderConfigurationError: credentials for that provider are missing
        """
        if settings.provider == ProviderId.GEMINI:
            provider: CompletionProvider = GeminiProvider(settings.google_api_key)
        else:
            provider = OpenAICompatibleProvider(
                settings.together_api_key,
                base_url=settings.base_url,
                timeout=settings.request_timeout,
            )
        logger.info(
            f"Model gateway ready: {settings.provider.value} / {settings.model_id}",
            extra={"extra_fields": {"provider": settings.provider.value, "model": settings.model_id}},
        )
        return cls({settings.provider: provider})

    async def complete(self, request: CompletionRequest, provider: ProviderId) -> CompletionResult:
        backend = self._providers.get(provider)
        if backend is None:
            raise ProviderConfigurationError(
                f"Provider '{provider.value}' is not configured", provider=provider.value
            )
        return await backend.complete(request)
