"""Request -> sanitize -> parse -> validate -> normalize, with bounded retries.

`AIRequestPipeline.execute()` is the single entry point used by the domain
builders. Provider, parse and shape failures are all retried the same way
(fixed delay, fixed budget); only ExhaustedRetriesError leaves this module.
"""

import asyncio
import json
from dataclasses import asdict
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

import json_repair

from exceptions import ExhaustedRetriesError, ParseError, ProviderError, ShapeError
from llm_config import (
    TOGETHER_REPETITION_PENALTY,
    TOGETHER_TOP_K,
    TOGETHER_TOP_P,
    ProviderId,
    ProviderSettings,
    load_provider_settings,
)
from llm_gateway import CompletionRequest, ModelGateway
from observability import log_data_structure, setup_structured_logger
from prompts.base import wrap_json_instructions
from response_sanitizer import sanitize
from response_validator import validate
from retry_utils import AttemptFailure, RetryPolicy, record_failure
from schemas import ResponseCategory
from value_normalizer import normalize

logger = setup_structured_logger("fitplan.pipeline")

# json_repair is slow on very large inputs; bigger payloads only get json.loads
JSON_REPAIR_MAX_CHARS = 150000


class PipelineState(str, Enum):
    """States of one pipeline attempt, used in log records."""

    REQUESTING = "requesting"
    PARSING = "parsing"
    VALIDATING = "validating"
    DONE = "done"
    FAILED = "failed"


def parse_candidate(cleaned: str) -> Dict[str, Any]:
    """Parse sanitized text into a JSON object.

    `json.loads` first; json_repair as a last resort for inputs under
    JSON_REPAIR_MAX_CHARS. Only a top-level object is accepted. Integers over
    the interpreter's digit limit and nesting deeper than the recursion limit
    are parse failures like any other.

    Raises:
        ParseError: text is empty or does not yield a JSON object
    """
    if not cleaned.strip():
        raise ParseError("Sanitized response is empty", cleaned_text=cleaned)

    try:
        parsed = json.loads(cleaned)
    except (ValueError, RecursionError) as exc:
        reason = exc.msg if isinstance(exc, json.JSONDecodeError) else f"{type(exc).__name__}: {exc}"
        if len(cleaned) >= JSON_REPAIR_MAX_CHARS:
            raise ParseError(
                f"Could not parse JSON ({reason}); input too large for repair "
                f"({len(cleaned)} chars)",
                cleaned_text=cleaned,
            ) from exc
        try:
            parsed = json_repair.repair_json(cleaned, return_objects=True)
        except Exception as repair_exc:  # noqa: BLE001
            raise ParseError(
                f"Could not parse JSON ({reason}); repair failed: {repair_exc}",
                cleaned_text=cleaned,
            ) from repair_exc

    if not isinstance(parsed, dict):
        raise ParseError(
            f"Expected a JSON object, got {type(parsed).__name__}", cleaned_text=cleaned
        )
    return parsed


class AIRequestPipeline:
    """Drives one category-tagged prompt through the gateway until it yields a typed record.

    Stateless across calls: concurrent `execute()` calls share nothing but the
    read-only gateway and configuration.
    """

    def __init__(
        self,
        gateway: ModelGateway,
        provider: ProviderId,
        model_id: str,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        settings: Optional[ProviderSettings] = None,
    ):
        self.gateway = gateway
        self.provider = provider
        self.model_id = model_id
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._settings = settings

    @classmethod
    def from_settings(
        cls,
        settings: Optional[ProviderSettings] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> "AIRequestPipeline":
        settings = settings or load_provider_settings()
        return cls(
            gateway=ModelGateway.from_settings(settings),
            provider=settings.provider,
            model_id=settings.model_id,
            retry_policy=retry_policy,
            settings=settings,
        )

    def build_request(self, prompt_text: str) -> CompletionRequest:
        """Wrap the prompt in the JSON-only instructions and attach sampling settings."""
        prompt = wrap_json_instructions(prompt_text)
        overrides: Dict[str, Any] = {}
        if self._settings is not None:
            overrides["max_output_tokens"] = self._settings.max_output_tokens
            overrides["temperature"] = self._settings.temperature

        if self.provider == ProviderId.TOGETHER:
            return CompletionRequest(
                model_id=self.model_id,
                prompt_text=f"[INST] {prompt} [/INST]",
                top_p=TOGETHER_TOP_P,
                top_k=TOGETHER_TOP_K,
                repetition_penalty=TOGETHER_REPETITION_PENALTY,
                **overrides,
            )
        return CompletionRequest(model_id=self.model_id, prompt_text=prompt, **overrides)

    async def _attempt(self, request: CompletionRequest, category: ResponseCategory, attempt: int):
        context = {"category": category.value, "attempt": attempt}

        logger.debug(
            f"Attempt {attempt}: {PipelineState.REQUESTING.value}",
            extra={"extra_fields": {**context, "state": PipelineState.REQUESTING.value}},
        )
        result = await self.gateway.complete(request, self.provider)
        log_data_structure(logger, "Raw AI response", result.text, **context)

        cleaned = sanitize(result.text)
        log_data_structure(
            logger, "Cleaned AI response", cleaned, state=PipelineState.PARSING.value, **context
        )
        parsed = parse_candidate(cleaned)

        if not validate(parsed, category):
            log_data_structure(
                logger,
                "Rejected AI payload",
                parsed,
                level="INFO",
                state=PipelineState.VALIDATING.value,
                **context,
            )
            raise ShapeError(category)

        return normalize(parsed, category)

    async def execute(self, prompt_text: str, category: ResponseCategory):
        """Run the prompt until a valid record is produced or the retry budget is spent.

        Args:
            prompt_text: Category-specific prompt (without the JSON instructions)
            category: Expected response shape

        Returns:
            Typed record for `category` (see value_normalizer.normalize)

        Raises:
            ExhaustedRetriesError: every attempt failed
        """
        request = self.build_request(prompt_text)
        failures: List[AttemptFailure] = []

        for attempt in range(1, self.retry_policy.total_attempts + 1):
            try:
                record = await self._attempt(request, category, attempt)
            except (ProviderError, ParseError, ShapeError) as exc:
                failure = record_failure(attempt, exc)
                failures.append(failure)
                logger.warning(
                    f"Attempt {attempt} for {category.value} failed ({failure.stage}): {exc}",
                    extra={
                        "extra_fields": {
                            "category": category.value,
                            "attempt": attempt,
                            "stage": failure.stage,
                            "error_type": failure.error_type,
                            "status_code": failure.status_code,
                        }
                    },
                )
                if self.retry_policy.should_retry(attempt):
                    await self._sleep(self.retry_policy.delay_seconds)
                continue

            logger.info(
                f"{category.value} response accepted on attempt {attempt}",
                extra={
                    "extra_fields": {
                        "category": category.value,
                        "attempt": attempt,
                        "state": PipelineState.DONE.value,
                    }
                },
            )
            return record

        logger.error(
            f"{category.value} request failed after {len(failures)} attempts",
            extra={
                "extra_fields": {
                    "category": category.value,
                    "state": PipelineState.FAILED.value,
                    "failures": [asdict(failure) for failure in failures],
                }
            },
        )
        raise ExhaustedRetriesError(category, failures)
