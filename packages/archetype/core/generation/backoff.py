"""Backoff policy for calls to the inference service.

Pure decision logic: classify a failure into the generation taxonomy and
decide whether (and how long) to wait before repeating the identical request.
No I/O and no shared state, so every decision is unit-testable without a clock.
"""

from __future__ import annotations

from dataclasses import dataclass
import random

from google.genai import errors as genai_errors
import httpx
from pydantic import BaseModel, Field

from archetype.core.generation.errors import (
    AuthInvalidError,
    GenerationError,
    GenerationErrorKind,
    NetworkError,
    RateLimitedError,
    UnknownGenerationError,
)

# Message fragments that indicate throttling or quota exhaustion
_THROTTLE_MARKERS = (
    "429",
    "resource_exhausted",
    "resource exhausted",
    "resource has been exhausted",
    "quota",
    "rate limit",
    "rate-limit",
    "too many requests",
)

# Message fragments that indicate a rejected or missing credential
_AUTH_MARKERS = (
    "api key not valid",
    "api_key_invalid",
    "requested entity was not found",
)

_AUTH_STATUSES = {"UNAUTHENTICATED", "PERMISSION_DENIED"}

# Kinds whose message may still reveal a quota problem
_UPGRADABLE_KINDS = {GenerationErrorKind.NETWORK, GenerationErrorKind.UNKNOWN}


def is_throttling_message(message: str | None) -> bool:
    """Check whether an error message signals rate limiting or quota exhaustion."""
    if not message:
        return False
    lowered = message.lower()
    return any(marker in lowered for marker in _THROTTLE_MARKERS)


def _classify_api_error(exc: genai_errors.APIError) -> GenerationError:
    code = getattr(exc, "code", None)
    status = str(getattr(exc, "status", None) or "").upper()
    message = str(exc)
    lowered = message.lower()

    if code == 429 or status == "RESOURCE_EXHAUSTED":
        return RateLimitedError(message, status_code=code, cause=exc)
    if code in (401, 403) or status in _AUTH_STATUSES:
        return AuthInvalidError(message, status_code=code, cause=exc)
    if any(marker in lowered for marker in _AUTH_MARKERS):
        return AuthInvalidError(message, status_code=code, cause=exc)
    return UnknownGenerationError(message, status_code=code, cause=exc)


def classify_error(exc: BaseException) -> GenerationError:
    """Map any raised exception onto the generation taxonomy.

    Args:
        exc: Exception raised by a transport call (or an existing GenerationError)

    Returns:
        GenerationError subclass for the failure
    """
    error: GenerationError
    if isinstance(exc, GenerationError):
        error = exc
    elif isinstance(exc, genai_errors.APIError):
        error = _classify_api_error(exc)
    elif isinstance(exc, (httpx.TransportError, ConnectionError, TimeoutError)):
        error = NetworkError(str(exc) or type(exc).__name__, cause=exc)
    else:
        error = UnknownGenerationError(str(exc) or type(exc).__name__, cause=exc)

    if error.kind in _UPGRADABLE_KINDS and is_throttling_message(error.message):
        return RateLimitedError(
            error.message,
            status_code=error.status_code,
            cause=error.cause or exc,
        )
    return error


@dataclass(frozen=True)
class BackoffDecision:
    """Result of one backoff decision."""

    retry: bool
    delay_s: float
    error: GenerationError


class BackoffPolicy(BaseModel):
    """Exponential backoff policy for throttled requests.

    Args:
        base_delay_s: Delay before the first retry, in seconds
        max_retries: Maximum number of retries after the initial attempt
        jitter: Jitter as fraction of delay (0.15 = +/-15% randomization)

    Notes:
        - Only RATE_LIMITED failures are retried
        - Delay doubles on each retry: base, 2*base, 4*base, ...
    """

    model_config = {"frozen": True}

    base_delay_s: float = Field(default=6.0, ge=0.0)
    max_retries: int = Field(default=3, ge=0)
    jitter: float = Field(default=0.0, ge=0.0, le=1.0)

    def compute_delay(self, attempt_number: int) -> float:
        """Compute the delay before a retry.

        Args:
            attempt_number: Retries already made (0 = first retry after initial failure)

        Returns:
            Delay in seconds before the next attempt
        """
        delay: float = self.base_delay_s * (2**attempt_number)
        if self.jitter > 0:
            spread: float = delay * self.jitter
            delay = max(0.0, delay + random.uniform(-spread, spread))
        return delay

    @property
    def worst_case_delay_s(self) -> float:
        """Cumulative delay of a request that exhausts every retry (without jitter)."""
        return self.base_delay_s * (2**self.max_retries - 1)

    def decide(self, error: BaseException, attempt_number: int) -> BackoffDecision:
        """Decide whether to retry after a failure.

        Args:
            error: Failure raised by the attempt
            attempt_number: Retries already made for this request

        Returns:
            BackoffDecision with the classified error and the delay to wait
        """
        classified = classify_error(error)
        if not classified.retryable or attempt_number >= self.max_retries:
            return BackoffDecision(retry=False, delay_s=0.0, error=classified)
        return BackoffDecision(
            retry=True,
            delay_s=self.compute_delay(attempt_number),
            error=classified,
        )


TEXT_BACKOFF = BackoffPolicy(base_delay_s=6.0, max_retries=3)
IMAGE_BACKOFF = BackoffPolicy(base_delay_s=7.0, max_retries=2)


@dataclass
class RetryState:
    """Retry bookkeeping for one logical request.

    Attributes:
        policy: Policy computing each next delay
        retries: Retries made so far
        total_delay_s: Cumulative delay waited so far
    """

    policy: BackoffPolicy
    retries: int = 0
    total_delay_s: float = 0.0

    @property
    def attempts(self) -> int:
        """Attempts made so far, including the initial one."""
        return self.retries + 1

    def next_decision(self, error: BaseException) -> BackoffDecision:
        """Ask the policy about a failure and record the retry if granted."""
        decision = self.policy.decide(error, self.retries)
        if decision.retry:
            self.retries += 1
            self.total_delay_s += decision.delay_s
        return decision
