"""Base types and protocol for inference transports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from archetype.core.generation.models import GenerationRequest


@dataclass(frozen=True)
class RawResponse:
    """Unvalidated service output.

    Text kinds populate ``text``; the image kind populates ``inline_data`` and
    ``mime_type``. Nothing here is trusted until the validator accepts it.
    """

    text: str | None = None
    inline_data: bytes | None = None
    mime_type: str | None = None
    model: str | None = None


class InferenceTransport(Protocol):
    """Protocol for one network round-trip to the inference service.

    Implementations perform exactly one call per ``send`` and let SDK/transport
    exceptions propagate unmodified. Retries, classification and validation
    belong to the inference client.
    """

    async def send(self, request: GenerationRequest) -> RawResponse:
        """Send one request and return the raw response.

        Args:
            request: Request to send

        Returns:
            RawResponse with the service output
        """
        ...
