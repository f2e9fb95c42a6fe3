"""Generation orchestrator.

Public entry points of the generation core. Each operation assembles a
GenerationRequest with the kind's response schema, dispatches it through the
inference client (portraits via the single-flight queue), and returns the
validated record. Failures surface as the client's GenerationError taxonomy,
unchanged; the orchestrator performs no recovery of its own and keeps no
state between calls.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
import logging
import uuid

from archetype.core.generation.client import InferenceClient
from archetype.core.generation.models import (
    DEFAULT_MODELS,
    FeedbackRecord,
    GenerationKind,
    GenerationRequest,
    Persona,
    PersonaMetadata,
    PersonaRecord,
    PortraitImage,
    ResearchNotes,
)
from archetype.core.generation.prompts import (
    FEEDBACK_SYSTEM_INSTRUCTION,
    PERSONA_SYSTEM_INSTRUCTION,
    build_feedback_payload,
    build_persona_payload,
    build_portrait_payload,
)
from archetype.core.generation.schemas import response_schema_for
from archetype.core.generation.serializer import SingleFlightQueue
from archetype.core.utils.logging import get_logger

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def new_id(prefix: str) -> str:
    """Generate a short unique identifier, e.g. ``arch-3f9c2a1b7d4e``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class GenerationOrchestrator:
    """Entry points for persona, feedback and portrait synthesis.

    Args:
        client: Inference client issuing validated requests.
        portrait_queue: Single-flight lane every portrait request goes through.
        models: Model identifier per kind (defaults to DEFAULT_MODELS).
        clock: Returns the current UTC time (injected in tests).
        id_factory: Builds an identifier from a prefix (injected in tests).
    """

    def __init__(
        self,
        client: InferenceClient,
        portrait_queue: SingleFlightQueue,
        *,
        models: Mapping[GenerationKind, str] | None = None,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[str], str] = new_id,
    ) -> None:
        self._client = client
        self._portrait_queue = portrait_queue
        self._models = {**DEFAULT_MODELS, **(models or {})}
        self._clock = clock
        self._id_factory = id_factory

    def build_request(
        self,
        kind: GenerationKind,
        payload: str,
        *,
        system_instruction: str | None = None,
    ) -> GenerationRequest:
        """Assemble a request carrying the kind's schema descriptor and model."""
        return GenerationRequest(
            kind=kind,
            payload=payload,
            response_schema=response_schema_for(kind),
            model=self._models[kind],
            system_instruction=system_instruction,
        )

    async def synthesize_personas(
        self,
        notes: ResearchNotes | str,
        metadata: PersonaMetadata | None = None,
    ) -> list[Persona]:
        """Synthesize personas from research notes.

        Every persona from one call shares a fresh group id; each gets its own id.
        Concurrent calls are allowed and are not serialized.

        Args:
            notes: Structured research notes or free text
            metadata: Categorization metadata (defaults to the values in ``notes``)

        Returns:
            Annotated personas, in the order the service returned them

        Raises:
            ValueError: If the notes have no content
            GenerationError: If generation fails
        """
        research = ResearchNotes.coerce(notes)
        if research.is_empty():
            raise ValueError("Research notes are empty")
        meta = metadata or PersonaMetadata.from_notes(research)

        request = self.build_request(
            GenerationKind.PERSONA_SYNTHESIS,
            build_persona_payload(research),
            system_instruction=PERSONA_SYSTEM_INSTRUCTION,
        )
        result = await self._client.call(request)
        records: list[PersonaRecord] = result.unwrap()

        group_id = self._id_factory("fw")
        created_at = self._clock()
        personas = [
            Persona(
                **record.model_dump(),
                id=self._id_factory("arch"),
                group_id=group_id,
                team_name=meta.team_name,
                researcher_name=meta.researcher_name,
                category=meta.stakeholder_tag,
                source_title=meta.source_title,
                created_at=created_at,
            )
            for record in records
        ]
        get_logger(__name__, group_id=group_id).info(
            "Synthesized %d persona(s) in %d attempt(s)", len(personas), result.attempts
        )
        return personas

    async def synthesize_feedback(
        self,
        notes: ResearchNotes | str,
        previous_feedback: FeedbackRecord | None = None,
    ) -> FeedbackRecord:
        """Grade research notes.

        Previous feedback, when given, is embedded in the payload so the
        service can assess incremental improvement. A lower score than the
        previous one is logged, not rejected.

        Raises:
            ValueError: If the notes have no content
            GenerationError: If generation fails
        """
        research = ResearchNotes.coerce(notes)
        if research.is_empty():
            raise ValueError("Research notes are empty")

        request = self.build_request(
            GenerationKind.FEEDBACK_SYNTHESIS,
            build_feedback_payload(research, previous_feedback),
            system_instruction=FEEDBACK_SYSTEM_INSTRUCTION,
        )
        result = await self._client.call(request)
        feedback: FeedbackRecord = result.unwrap()

        if previous_feedback is not None and feedback.score < previous_feedback.score:
            logger.warning(
                "Feedback score dropped from %d to %d",
                previous_feedback.score,
                feedback.score,
            )
        return feedback

    async def synthesize_portrait(self, prompt_text: str) -> PortraitImage:
        """Generate a portrait through the single-flight queue.

        Raises:
            ValueError: If the prompt is blank
            GenerationError: If generation fails
        """
        if not prompt_text.strip():
            raise ValueError("Portrait prompt is empty")

        request = self.build_request(
            GenerationKind.PORTRAIT_SYNTHESIS,
            build_portrait_payload(prompt_text),
        )
        ticket = self._portrait_queue.enqueue(lambda: self._client.call(request))
        result = await ticket
        return result.unwrap()
