"""Schema validation for raw service responses.

Turns a RawResponse into the typed record promised by the request kind, or
raises MalformedResponseError. Never returns a partially populated record.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from archetype.core.generation.errors import MalformedResponseError
from archetype.core.generation.models import (
    FeedbackRecord,
    GenerationKind,
    PersonaBatch,
    PersonaRecord,
    PortraitImage,
)
from archetype.core.generation.providers.base import RawResponse

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Longest response excerpt quoted in error messages
_SNIPPET_CHARS = 200


def validate(
    kind: GenerationKind, raw: RawResponse
) -> list[PersonaRecord] | FeedbackRecord | PortraitImage:
    """Validate a raw response for the given request kind.

    Args:
        kind: Kind of the request that produced the response
        raw: Unvalidated service output

    Returns:
        list[PersonaRecord] for persona synthesis, FeedbackRecord for feedback
        synthesis, PortraitImage for portrait synthesis

    Raises:
        MalformedResponseError: If the response does not match the promised shape
    """
    match kind:
        case GenerationKind.PERSONA_SYNTHESIS:
            return list(_validate_json(kind, raw.text, PersonaBatch).archetypes)
        case GenerationKind.FEEDBACK_SYNTHESIS:
            return _validate_json(kind, raw.text, FeedbackRecord)
        case GenerationKind.PORTRAIT_SYNTHESIS:
            return validate_image(raw)


def _validate_json(kind: GenerationKind, text: str | None, model: type[M]) -> M:
    if not text or not text.strip():
        raise MalformedResponseError(f"Empty response for {kind.value}")

    try:
        return model.model_validate_json(text)
    except ValidationError as e:
        logger.error(f"{kind.value} response failed validation: {e.error_count()} error(s)")
        raise MalformedResponseError(
            f"Response does not match {model.__name__}: {e} (snippet={text[:_SNIPPET_CHARS]!r})",
            cause=e,
        ) from e


def validate_image(raw: RawResponse) -> PortraitImage:
    """Validate an inline image response.

    Raises:
        MalformedResponseError: If the payload bytes or the MIME type are missing
    """
    if not raw.inline_data:
        raise MalformedResponseError("No image generated (missing inline data)")
    if not raw.mime_type:
        raise MalformedResponseError("Image response is missing its MIME type")
    return PortraitImage(mime_type=raw.mime_type, data=raw.inline_data)
