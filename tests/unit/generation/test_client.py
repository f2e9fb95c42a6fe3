"""Tests for the inference client retry loop."""

from __future__ import annotations

import json

from google.genai import errors as genai_errors
import httpx
import pytest

from archetype.core.generation.backoff import BackoffPolicy
from archetype.core.generation.client import InferenceClient
from archetype.core.generation.errors import GenerationErrorKind
from archetype.core.generation.models import GenerationKind, GenerationRequest
from archetype.core.generation.providers.base import RawResponse
from archetype.core.generation.schemas import response_schema_for


def _request(kind: GenerationKind = GenerationKind.PERSONA_SYNTHESIS) -> GenerationRequest:
    return GenerationRequest(
        kind=kind,
        payload="Raw research notes",
        response_schema=response_schema_for(kind),
        model="test-model",
    )


def _quota_error() -> genai_errors.ClientError:
    return genai_errors.ClientError(
        429,
        {"error": {"code": 429, "message": "Resource has been exhausted", "status": "RESOURCE_EXHAUSTED"}},
    )


def _auth_error() -> genai_errors.ClientError:
    return genai_errors.ClientError(
        400,
        {"error": {"code": 400, "message": "API key not valid.", "status": "INVALID_ARGUMENT"}},
    )


class TestInferenceClient:
    """Test suite for InferenceClient.call."""

    @pytest.mark.asyncio
    async def test_success_first_attempt(self, scripted_transport, fake_clock, persona_response):
        transport = scripted_transport(persona_response)
        client = InferenceClient(transport, sleep=fake_clock.sleep)

        result = await client.call(_request())

        assert result.ok
        assert len(result.value) == 2
        assert result.attempts == 1
        assert fake_clock.sleeps == []

    @pytest.mark.asyncio
    async def test_retries_quota_errors_then_succeeds(
        self, scripted_transport, fake_clock, persona_response
    ):
        """Test throttled attempts wait 6s then 12s and repeat the same request."""
        transport = scripted_transport(_quota_error(), _quota_error(), persona_response)
        client = InferenceClient(transport, sleep=fake_clock.sleep)
        request = _request()

        result = await client.call(request)

        assert result.ok
        assert result.attempts == 3
        assert fake_clock.sleeps == [6.0, 12.0]
        assert all(sent is request for sent in transport.requests)

    @pytest.mark.asyncio
    async def test_text_gives_up_after_three_retries(self, scripted_transport, fake_clock):
        """Test text requests make 4 attempts before surfacing RATE_LIMITED."""
        transport = scripted_transport(*[_quota_error() for _ in range(4)])
        client = InferenceClient(transport, sleep=fake_clock.sleep)

        result = await client.call(_request(GenerationKind.FEEDBACK_SYNTHESIS))

        assert not result.ok
        assert result.error.kind is GenerationErrorKind.RATE_LIMITED
        assert result.attempts == 4
        assert transport.calls == 4
        assert fake_clock.sleeps == [6.0, 12.0, 24.0]

    @pytest.mark.asyncio
    async def test_image_gives_up_after_two_retries(self, scripted_transport, fake_clock):
        """Test portrait requests use the image policy (7s base, 2 retries)."""
        transport = scripted_transport(*[_quota_error() for _ in range(3)])
        client = InferenceClient(transport, sleep=fake_clock.sleep)

        result = await client.call(_request(GenerationKind.PORTRAIT_SYNTHESIS))

        assert result.error.kind is GenerationErrorKind.RATE_LIMITED
        assert result.attempts == 3
        assert fake_clock.sleeps == [7.0, 14.0]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("exc", "kind"),
        [
            (_auth_error(), GenerationErrorKind.AUTH_INVALID),
            (httpx.ReadTimeout("read timed out"), GenerationErrorKind.NETWORK),
            (RuntimeError("unexpected"), GenerationErrorKind.UNKNOWN),
        ],
    )
    async def test_non_quota_errors_fail_immediately(
        self, scripted_transport, fake_clock, exc, kind
    ):
        """Test non-retryable failures surface after one attempt with no wait."""
        transport = scripted_transport(exc)
        client = InferenceClient(transport, sleep=fake_clock.sleep)

        result = await client.call(_request())

        assert result.error.kind is kind
        assert result.error.cause is exc
        assert result.attempts == 1
        assert fake_clock.sleeps == []

    @pytest.mark.asyncio
    async def test_malformed_response_not_retried(self, scripted_transport, fake_clock):
        """Test a response failing validation is returned as MALFORMED."""
        transport = scripted_transport(RawResponse(text=json.dumps({"archetypes": []})))
        client = InferenceClient(transport, sleep=fake_clock.sleep)

        result = await client.call(_request())

        assert result.error.kind is GenerationErrorKind.MALFORMED
        assert transport.calls == 1

    @pytest.mark.asyncio
    async def test_custom_policies(self, scripted_transport, fake_clock, portrait_response):
        transport = scripted_transport(_quota_error(), portrait_response)
        client = InferenceClient(
            transport,
            image_policy=BackoffPolicy(base_delay_s=0.5, max_retries=1),
            sleep=fake_clock.sleep,
        )

        result = await client.call(_request(GenerationKind.PORTRAIT_SYNTHESIS))

        assert result.ok
        assert result.value.mime_type == "image/png"
        assert fake_clock.sleeps == [0.5]

    def test_policy_for_kind(self, scripted_transport):
        text = BackoffPolicy(base_delay_s=1.0)
        image = BackoffPolicy(base_delay_s=2.0)
        client = InferenceClient(scripted_transport(), text_policy=text, image_policy=image)

        assert client.policy_for(_request(GenerationKind.FEEDBACK_SYNTHESIS)) is text
        assert client.policy_for(_request(GenerationKind.PORTRAIT_SYNTHESIS)) is image
