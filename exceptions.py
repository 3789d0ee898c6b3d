"""Error taxonomy for the LLM response pipeline.

Provides:
- ProviderError and its subclasses: transport and empty-response failures
- ParseError: sanitized text is still not well-formed JSON
- ShapeError: JSON parses but fails the category's structural validator
- ExhaustedRetriesError: terminal, the only error that leaves the pipeline
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from retry_utils import AttemptFailure
    from schemas import ResponseCategory


class PipelineError(Exception):
    """Base class for every error raised by the response pipeline."""

    pass


class ProviderError(PipelineError):
    """Raised by the model gateway when a provider call produces no usable text."""

    def __init__(self, message: str, provider: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class TransportError(ProviderError):
    """Network/HTTP failure, or a non-success status from the provider."""

    pass


class ProviderConfigurationError(TransportError):
    """Missing or malformed credentials detected while constructing a provider."""

    pass


class EmptyResponseError(ProviderError):
    """The provider answered but the response carried no extractable text."""

    pass


class ParseError(PipelineError):
    """Sanitized text could not be parsed as a JSON object."""

    def __init__(self, message: str, cleaned_text: str = ""):
        super().__init__(message)
        self.cleaned_text = cleaned_text


class ShapeError(PipelineError):
    """Parsed JSON was rejected by the structural validator of a category."""

    def __init__(self, category: "ResponseCategory"):
        super().__init__(f"Invalid {category.value} response structure")
        self.category = category


class ExhaustedRetriesError(PipelineError):
    """All attempts for one request failed; surfaced to the domain builders."""

    def __init__(self, category: "ResponseCategory", failures: List["AttemptFailure"]):
        self.category = category
        self.failures = list(failures)
        last = self.failures[-1].message if self.failures else "no attempts made"
        super().__init__(
            f"Failed to process AI response for {category.value} after "
            f"{len(self.failures)} attempts (last error: {last})"
        )

    @property
    def attempts(self) -> int:
        return len(self.failures)
