"""Generation core models.

Defines the data models that flow through the generation core:
- GenerationKind: Which synthesis a request performs
- GenerationRequest: Immutable request handed to the inference client
- ResearchNotes: Researcher-supplied notes (input to text synthesis)
- PersonaRecord / Persona: Validated persona and its annotated form
- FeedbackRecord: Validated tutor feedback on research notes
- PortraitImage: Validated inline image payload
- GenerationResult: Success-or-error wrapper returned by the client
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from archetype.core.generation.errors import GenerationError

T = TypeVar("T")


class GenerationKind(str, Enum):
    """Kind of synthesis a request performs.

    Attributes:
        PERSONA_SYNTHESIS: Research notes -> list of persona records (text).
        FEEDBACK_SYNTHESIS: Research notes -> tutor feedback record (text).
        PORTRAIT_SYNTHESIS: Persona description -> headshot image.
    """

    PERSONA_SYNTHESIS = "persona_synthesis"
    FEEDBACK_SYNTHESIS = "feedback_synthesis"
    PORTRAIT_SYNTHESIS = "portrait_synthesis"

    def is_text(self) -> bool:
        """Whether responses of this kind are JSON text.

        Returns:
            True for PERSONA_SYNTHESIS and FEEDBACK_SYNTHESIS.
        """
        return self in {GenerationKind.PERSONA_SYNTHESIS, GenerationKind.FEEDBACK_SYNTHESIS}

    def is_image(self) -> bool:
        """Whether responses of this kind are inline image payloads."""
        return self is GenerationKind.PORTRAIT_SYNTHESIS


DEFAULT_MODELS: dict[GenerationKind, str] = {
    GenerationKind.PERSONA_SYNTHESIS: "gemini-3-pro-preview",
    GenerationKind.FEEDBACK_SYNTHESIS: "gemini-3-flash-preview",
    GenerationKind.PORTRAIT_SYNTHESIS: "gemini-2.5-flash-image",
}


class GenerationRequest(BaseModel):
    """One logical request to the inference service.

    Attributes:
        kind: Synthesis kind (selects validator, backoff policy and config).
        payload: Opaque, already-serialized prompt text.
        response_schema: JSON schema constraining the service's output
            (required for text kinds, unused for the image kind).
        model: Service model identifier.
        system_instruction: Optional system instruction for text kinds.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: GenerationKind
    payload: str = Field(min_length=1)
    response_schema: dict[str, Any] | None = None
    model: str = Field(min_length=1)
    system_instruction: str | None = None

    @model_validator(mode="after")
    def _check_schema_for_kind(self) -> GenerationRequest:
        if self.kind.is_text() and not self.response_schema:
            raise ValueError(f"{self.kind.value} requests require a response_schema")
        return self


class ResearchNotes(BaseModel):
    """Research notes submitted by a researcher.

    All sections are free text. Team, researcher and stakeholder fields double
    as the default categorization metadata for personas built from the notes.
    """

    model_config = ConfigDict(frozen=True)

    title: str = ""
    researcher_name: str = ""
    team_name: str = ""
    stakeholder_tag: str = ""
    description: str = ""
    pain_points: str = ""
    needs: str = ""
    goals: str = ""
    actions: str = ""

    @classmethod
    def coerce(cls, notes: ResearchNotes | str) -> ResearchNotes:
        """Accept either structured notes or a free-text blob."""
        if isinstance(notes, ResearchNotes):
            return notes
        return cls(description=notes)

    def is_empty(self) -> bool:
        """Whether every content section is blank."""
        sections = (
            self.description,
            self.pain_points,
            self.needs,
            self.goals,
            self.actions,
        )
        return not any(s.strip() for s in sections)


class _WireModel(BaseModel):
    """Base for records decoded from service JSON (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
        frozen=True,
    )


class PersonaRecord(_WireModel):
    """Persona exactly as promised by the persona response schema."""

    name: str = Field(description="A realistic full name for the persona.")
    role: str = Field(
        description="Job title or primary role (e.g., 'Busy Parent', 'Senior Developer')."
    )
    age: int = Field(ge=0, description="Age of the persona.")
    quote: str = Field(description="A characteristic quote that captures their attitude.")
    bio: str = Field(description="A short biography (2-3 sentences).")
    goals: list[str] = Field(description="3-5 key goals or needs.")
    frustrations: list[str] = Field(description="3-5 key pain points or frustrations.")
    motivations: list[str] = Field(description="3 key drivers for their behavior.")
    tech_literacy: int = Field(ge=1, le=10, description="Score from 1 (Low) to 10 (High).")
    personality_traits: list[str] = Field(
        description="4-5 adjectives describing personality (e.g., 'Analytical', 'Impulsive')."
    )
    image_prompt: str = Field(
        description="A detailed physical description to generate a photorealistic headshot."
    )
    tags: list[str] = Field(description="Short behavioral tags for organizing personas.")


class PersonaBatch(_WireModel):
    """Response envelope for persona synthesis."""

    archetypes: list[PersonaRecord] = Field(min_length=1)


class PersonaMetadata(BaseModel):
    """Caller-supplied categorization metadata attached to personas."""

    model_config = ConfigDict(frozen=True)

    team_name: str = ""
    researcher_name: str = ""
    stakeholder_tag: str = ""
    source_title: str = ""

    @classmethod
    def from_notes(cls, notes: ResearchNotes) -> PersonaMetadata:
        return cls(
            team_name=notes.team_name,
            researcher_name=notes.researcher_name,
            stakeholder_tag=notes.stakeholder_tag,
            source_title=notes.title,
        )


class Persona(PersonaRecord):
    """Persona annotated with identity, grouping and categorization metadata.

    Attributes:
        id: Unique persona identifier.
        group_id: Shared by every persona produced by one synthesis call.
        team_name: Team that submitted the research.
        researcher_name: Researcher that submitted the research.
        category: Stakeholder tag the persona is filed under.
        source_title: Title of the research notes.
        created_at: When the persona was synthesized (UTC).
    """

    id: str = Field(min_length=1)
    group_id: str = Field(min_length=1)
    team_name: str = ""
    researcher_name: str = ""
    category: str = ""
    source_title: str = ""
    created_at: datetime


class FeedbackRecord(_WireModel):
    """Tutor feedback exactly as promised by the feedback response schema."""

    grade: str = Field(
        min_length=1,
        description="A letter grade (A+, A, B, C, D, F) based on the depth and quality of the notes.",
    )
    score: int = Field(ge=0, le=100, description="A numeric score from 0-100.")
    feedback_title: str = Field(description="A short, punchy title for the feedback.")
    strengths: list[str] = Field(description="2-3 points highlighting what was done well.")
    improvements: list[str] = Field(
        description="2-3 specific, actionable tips to improve the data quality."
    )
    thought_provoking_questions: list[str] = Field(
        description="2 questions that challenge the researcher to think deeper about users."
    )
    overall_comment: str = Field(description="A short, encouraging closing paragraph.")


class PortraitImage(BaseModel):
    """Inline image returned by portrait synthesis."""

    model_config = ConfigDict(strict=True, frozen=True)

    mime_type: str = Field(min_length=1)
    data: bytes = Field(min_length=1, repr=False)

    @property
    def data_url(self) -> str:
        """Self-describing data URL (``data:<mime>;base64,<payload>``)."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


@dataclass(frozen=True)
class GenerationResult(Generic[T]):
    """Outcome of one logical request: a validated value or an error.

    Exactly one of ``value`` / ``error`` is meaningful, selected by ``ok``.
    """

    value: T | None = None
    error: GenerationError | None = None
    attempts: int = 1

    @classmethod
    def success(cls, value: T, attempts: int = 1) -> GenerationResult[T]:
        return cls(value=value, attempts=attempts)

    @classmethod
    def failure(cls, error: GenerationError, attempts: int = 1) -> GenerationResult[T]:
        return cls(error=error, attempts=attempts)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the validated value or raise the wrapped error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
