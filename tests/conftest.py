"""Shared pytest fixtures for archetype tests."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest

from archetype.core.generation.models import GenerationRequest
from archetype.core.generation.providers.base import RawResponse

# ============================================================================
# Fakes
# ============================================================================


class FakeClock:
    """Virtual clock: ``sleep`` advances time instead of waiting.

    Only meaningful when sleepers run one after another (retries, the
    single-flight lane); concurrent sleepers would add up.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay
        # Yield so other tasks interleave as they would with a real sleep
        await asyncio.sleep(0)


class ScriptedTransport:
    """Transport replaying a fixed list of outcomes (responses or exceptions)."""

    def __init__(
        self,
        outcomes: list[RawResponse | BaseException],
        clock: FakeClock | None = None,
    ) -> None:
        self._outcomes = list(outcomes)
        self._clock = clock
        self.requests: list[GenerationRequest] = []
        self.started_at: list[float] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def send(self, request: GenerationRequest) -> RawResponse:
        self.requests.append(request)
        if self._clock is not None:
            self.started_at.append(self._clock.now)
        if not self._outcomes:
            raise AssertionError("ScriptedTransport ran out of outcomes")
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def fake_clock() -> FakeClock:
    """Fresh virtual clock."""
    return FakeClock()


@pytest.fixture
def scripted_transport(fake_clock: FakeClock):
    """Factory building a ScriptedTransport bound to the test's clock."""

    def _make(*outcomes: RawResponse | BaseException) -> ScriptedTransport:
        return ScriptedTransport(list(outcomes), clock=fake_clock)

    return _make


# ============================================================================
# Service Payload Fixtures
# ============================================================================


@pytest.fixture
def persona_payload() -> dict[str, Any]:
    """Two-persona response body as the service returns it (camelCase keys)."""
    return {
        "archetypes": [
            {
                "name": "Maya Chen",
                "role": "Busy Parent",
                "age": 38,
                "quote": "If it takes more than two taps, I'm out.",
                "bio": "Works full time and shops for a family of four. Orders groceries on her phone during her commute.",
                "goals": ["Finish checkout quickly", "Reuse past orders", "Avoid surprise fees"],
                "frustrations": ["Hidden delivery fees", "Forced account creation", "Slow pages"],
                "motivations": ["Saving time", "Predictable costs", "Convenience"],
                "techLiteracy": 6,
                "personalityTraits": ["Pragmatic", "Impatient", "Organized", "Loyal"],
                "imagePrompt": "Woman in her late thirties, short black hair, casual blazer, warm smile",
                "tags": ["time-poor", "mobile-first"],
            },
            {
                "name": "Frank Okafor",
                "role": "Retired Engineer",
                "age": 67,
                "quote": "Show me the total before I commit.",
                "bio": "Recently retired and cautious with online payments. Compares prices across several shops.",
                "goals": ["Understand the final price", "Pay securely", "Track deliveries"],
                "frustrations": ["Tiny fonts", "Unclear error messages", "Timeouts during payment"],
                "motivations": ["Security", "Value for money", "Control"],
                "techLiteracy": 4,
                "personalityTraits": ["Analytical", "Cautious", "Patient", "Skeptical"],
                "imagePrompt": "Man in his late sixties, grey beard, reading glasses, cardigan",
                "tags": ["security-conscious", "desktop"],
            },
        ]
    }


@pytest.fixture
def persona_response(persona_payload: dict[str, Any]) -> RawResponse:
    """RawResponse carrying the two-persona body."""
    return RawResponse(text=json.dumps(persona_payload), model="gemini-3-pro-preview")


@pytest.fixture
def feedback_payload() -> dict[str, Any]:
    """Feedback response body as the service returns it (camelCase keys)."""
    return {
        "grade": "B",
        "score": 78,
        "feedbackTitle": "Solid Start, Dig Deeper",
        "strengths": ["Clear pain points", "Concrete quotes"],
        "improvements": ["Separate actions from motivations", "Add more participants"],
        "thoughtProvokingQuestions": [
            "What do users do right before abandoning checkout?",
            "Which frustrations are deal breakers?",
        ],
        "overallComment": "Good momentum. Tighten the behaviors and you are ready for personas.",
    }


@pytest.fixture
def feedback_response(feedback_payload: dict[str, Any]) -> RawResponse:
    """RawResponse carrying the feedback body."""
    return RawResponse(text=json.dumps(feedback_payload), model="gemini-3-flash-preview")


@pytest.fixture
def portrait_response() -> RawResponse:
    """RawResponse carrying a tiny inline PNG payload."""
    return RawResponse(
        inline_data=b"\x89PNG\r\n\x1a\nportrait",
        mime_type="image/png",
        model="gemini-2.5-flash-image",
    )
