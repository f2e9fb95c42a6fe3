"""Inference client with backoff.

Wraps one logical request to the inference service: send through the
transport, retry throttled attempts per the kind's backoff policy, and hand
every successful response to the validator before returning it.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
import logging
from typing import Any

from archetype.core.generation.backoff import (
    IMAGE_BACKOFF,
    TEXT_BACKOFF,
    BackoffPolicy,
    RetryState,
)
from archetype.core.generation.errors import GenerationError
from archetype.core.generation.models import GenerationRequest, GenerationResult
from archetype.core.generation.providers.base import InferenceTransport
from archetype.core.generation.validator import validate

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


class InferenceClient:
    """Async client issuing validated requests to the inference service.

    Text kinds use ``text_policy`` and the image kind uses ``image_policy``.
    ``call`` never raises for service failures: every outcome is returned as a
    GenerationResult carrying either a validated record or a GenerationError.

    Args:
        transport: Transport performing the network round-trip.
        text_policy: Backoff policy for persona and feedback requests.
        image_policy: Backoff policy for portrait requests.
        sleep: Awaitable sleep used between retries (injected in tests).
    """

    def __init__(
        self,
        transport: InferenceTransport,
        *,
        text_policy: BackoffPolicy = TEXT_BACKOFF,
        image_policy: BackoffPolicy = IMAGE_BACKOFF,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._transport = transport
        self._text_policy = text_policy
        self._image_policy = image_policy
        self._sleep = sleep

    def policy_for(self, request: GenerationRequest) -> BackoffPolicy:
        """Backoff policy governing a request."""
        return self._image_policy if request.kind.is_image() else self._text_policy

    async def call(self, request: GenerationRequest) -> GenerationResult[Any]:
        """Issue a request, retrying throttled attempts.

        Args:
            request: Request to issue (repeated verbatim on retry)

        Returns:
            GenerationResult with the validated record, or the classified error
        """
        state = RetryState(policy=self.policy_for(request))

        while True:
            try:
                raw = await self._transport.send(request)
            except Exception as e:
                decision = state.next_decision(e)
                if not decision.retry:
                    logger.error(
                        "%s request failed after %d attempt(s): %s",
                        request.kind.value,
                        state.attempts,
                        decision.error,
                    )
                    return GenerationResult.failure(decision.error, attempts=state.attempts)

                logger.warning(
                    "%s attempt %d/%d throttled, retrying in %.1fs: %s",
                    request.kind.value,
                    state.retries,
                    state.policy.max_retries + 1,
                    decision.delay_s,
                    decision.error.message,
                )
                await self._sleep(decision.delay_s)
                continue

            try:
                record = validate(request.kind, raw)
            except GenerationError as e:
                logger.error("%s response rejected: %s", request.kind.value, e)
                return GenerationResult.failure(e, attempts=state.attempts)

            logger.debug(
                "%s request succeeded (attempts=%d, waited=%.1fs)",
                request.kind.value,
                state.attempts,
                state.total_delay_s,
            )
            return GenerationResult.success(record, attempts=state.attempts)
