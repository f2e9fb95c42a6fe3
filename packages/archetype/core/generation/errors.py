from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class GenerationErrorKind(str, Enum):
    """Failure taxonomy surfaced by the generation core."""

    RATE_LIMITED = "rate_limited"
    AUTH_INVALID = "auth_invalid"
    MALFORMED = "malformed"
    NETWORK = "network"
    UNKNOWN = "unknown"


class GenerationErrorData(BaseModel):
    """Structured data for generation failures.

    Args:
        kind: Taxonomy member
        message: Originating error message
        retryable: Whether the backoff policy may retry this failure
        status_code: Service status code (if available)
        cause: Original exception that caused this error
    """

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    kind: GenerationErrorKind
    message: str
    retryable: bool = False
    status_code: int | None = None
    cause: BaseException | None = Field(default=None, repr=False)


class GenerationError(Exception):
    """Base exception for all generation failures.

    Wraps structured error data in an exception for ergonomic error handling.
    Subclasses fix the taxonomy kind; construct them rather than this class.

    Attributes:
        data: Structured error data (GenerationErrorData)
        kind: Taxonomy member
        message: Originating error message
        retryable: Whether a retry can change the outcome
        status_code: Service status code (if available)
        cause: Original exception that caused this error
    """

    kind: GenerationErrorKind = GenerationErrorKind.UNKNOWN
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.data = GenerationErrorData(
            kind=self.kind,
            message=message,
            retryable=self.retryable,
            status_code=status_code,
            cause=cause,
        )
        self.message = self.data.message
        self.status_code = self.data.status_code
        self.cause = self.data.cause

        super().__init__(str(self))

    def __str__(self) -> str:
        """Format error for logging and display."""
        parts = [f"[{self.kind.value}] {self.message}"]
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        return " | ".join(parts)


class RateLimitedError(GenerationError):
    """Service throttled the request or the quota is exhausted."""

    kind = GenerationErrorKind.RATE_LIMITED
    retryable = True


class AuthInvalidError(GenerationError):
    """Credential missing or rejected by the service."""

    kind = GenerationErrorKind.AUTH_INVALID


class MalformedResponseError(GenerationError):
    """Service response did not match the promised shape."""

    kind = GenerationErrorKind.MALFORMED


class NetworkError(GenerationError):
    """Transport-level failure (DNS, connection reset, timeout, etc.)."""

    kind = GenerationErrorKind.NETWORK


class UnknownGenerationError(GenerationError):
    """Failure that matches no other category."""

    kind = GenerationErrorKind.UNKNOWN


ERROR_TYPES: dict[GenerationErrorKind, type[GenerationError]] = {
    GenerationErrorKind.RATE_LIMITED: RateLimitedError,
    GenerationErrorKind.AUTH_INVALID: AuthInvalidError,
    GenerationErrorKind.MALFORMED: MalformedResponseError,
    GenerationErrorKind.NETWORK: NetworkError,
    GenerationErrorKind.UNKNOWN: UnknownGenerationError,
}
