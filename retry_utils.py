"""Retry policy for LLM requests.

Provides:
- RetryPolicy: fixed budget (1 attempt + N retries) with a fixed delay
- AttemptFailure: diagnostic record of one failed attempt
- failure_stage: classify a pipeline error as transport or content failure
"""

import os
from dataclasses import dataclass
from typing import Optional

from exceptions import ParseError, ProviderError, ShapeError


# Configuration (can be overridden via environment variables)
DEFAULT_MAX_RETRIES = int(os.getenv("FITPLAN_MAX_RETRIES", "2"))
DEFAULT_RETRY_DELAY_SECONDS = float(os.getenv("FITPLAN_RETRY_DELAY", "1.0"))


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry-with-delay.

    `max_retries` counts re-attempts, so the total number of attempts is
    `max_retries + 1`. The delay is fixed, not exponential.
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    def should_retry(self, attempt: int) -> bool:
        """Whether another attempt is allowed after `attempt` (1-indexed) failed."""
        return attempt < self.total_attempts


@dataclass(frozen=True)
class AttemptFailure:
    """One failed attempt, kept for diagnostics."""

    attempt: int
    stage: str
    error_type: str
    message: str
    status_code: Optional[int] = None


def failure_stage(exc: Exception) -> str:
    """Classify an error into the pipeline stage that produced it.

    Args:
        exc: Error raised during one attempt

    Returns:
        "transport", "parse", "shape" or "unknown"
    """
    if isinstance(exc, ProviderError):
        return "transport"
    if isinstance(exc, ParseError):
        return "parse"
    if isinstance(exc, ShapeError):
        return "shape"
    return "unknown"


def record_failure(attempt: int, exc: Exception) -> AttemptFailure:
    """Build the diagnostic record for a failed attempt."""
    return AttemptFailure(
        attempt=attempt,
        stage=failure_stage(exc),
        error_type=type(exc).__name__,
        message=str(exc),
        status_code=getattr(exc, "status_code", None),
    )
