"""Shared test fixtures for the fitness plan pipeline."""
import os
import tempfile

# Keep structured logs out of the developer's log directory
os.environ.setdefault("FITPLAN_LOG_DIR", tempfile.mkdtemp(prefix="fitplan_test_logs_"))

import pytest

from ai_pipeline import AIRequestPipeline
from exceptions import TransportError
from llm_config import ProviderId
from llm_gateway import CompletionResult
from retry_utils import RetryPolicy
from schemas import MacroTarget, PersonalData


class FakeGateway:
    """Scripted stand-in for ModelGateway.

    Each call consumes the next scripted outcome: a string is returned as the
    completion text, an exception instance is raised. When the script is
    exhausted the last outcome is repeated. A callable outcome receives the
    request and returns either of those.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests = []

    async def complete(self, request, provider):
        self.requests.append(request)
        if not self.outcomes:
            raise TransportError("No scripted outcome", provider=provider.value)
        index = min(len(self.requests), len(self.outcomes)) - 1
        outcome = self.outcomes[index]
        if callable(outcome) and not isinstance(outcome, Exception):
            outcome = outcome(request)
        if isinstance(outcome, Exception):
            raise outcome
        return CompletionResult(text=outcome, provider=provider.value, model_id=request.model_id)

    @property
    def calls(self):
        return len(self.requests)


class RecordingSleep:
    """Replaces asyncio.sleep; records requested delays without waiting."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def make_pipeline(recording_sleep):
    """Factory building a zero-delay pipeline over a scripted gateway."""

    def _make(*outcomes, provider=ProviderId.GEMINI, max_retries=2):
        gateway = FakeGateway(*outcomes)
        pipeline = AIRequestPipeline(
            gateway=gateway,
            provider=provider,
            model_id="test-model",
            retry_policy=RetryPolicy(max_retries=max_retries, delay_seconds=1.0),
            sleep=recording_sleep,
        )
        return pipeline, gateway

    return _make


def prompt_router(routes, default):
    """Scripted outcome choosing a response by a marker found in the prompt.

    Args:
        routes: Sequence of (marker, response) pairs checked in order
        default: Response when no marker matches
    """

    def _route(request):
        for marker, response in routes:
            if marker in request.prompt_text:
                return response
        return default

    return _route


@pytest.fixture
def sample_profile():
    return PersonalData(
        age=29,
        weight=80,
        height=180,
        gender="male",
        activity_level="active",
        goal="muscle-gain",
    )


@pytest.fixture
def sample_macro_targets():
    return [
        MacroTarget(nutrient="protein", amount=160, details="2g/kg"),
        MacroTarget(nutrient="carbohydrates", amount=220, details="Training fuel"),
        MacroTarget(nutrient="fats", amount=70, details="Hormones"),
    ]
