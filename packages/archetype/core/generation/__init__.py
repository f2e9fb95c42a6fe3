"""Generation orchestration core.

Note: factory is not imported here to avoid a circular import with config.
Import directly: from archetype.core.generation.factory import create_orchestrator
"""

from archetype.core.generation.backoff import (
    IMAGE_BACKOFF,
    TEXT_BACKOFF,
    BackoffDecision,
    BackoffPolicy,
    RetryState,
    classify_error,
)
from archetype.core.generation.client import InferenceClient
from archetype.core.generation.errors import (
    AuthInvalidError,
    GenerationError,
    GenerationErrorKind,
    MalformedResponseError,
    NetworkError,
    RateLimitedError,
    UnknownGenerationError,
)
from archetype.core.generation.models import (
    FeedbackRecord,
    GenerationKind,
    GenerationRequest,
    GenerationResult,
    Persona,
    PersonaMetadata,
    PersonaRecord,
    PortraitImage,
    ResearchNotes,
)
from archetype.core.generation.orchestrator import GenerationOrchestrator
from archetype.core.generation.providers import GeminiTransport, InferenceTransport, RawResponse
from archetype.core.generation.serializer import QueueTicket, SingleFlightQueue
from archetype.core.generation.validator import validate

__all__ = [
    # Backoff
    "BackoffDecision",
    "BackoffPolicy",
    "IMAGE_BACKOFF",
    "RetryState",
    "TEXT_BACKOFF",
    "classify_error",
    # Errors
    "AuthInvalidError",
    "GenerationError",
    "GenerationErrorKind",
    "MalformedResponseError",
    "NetworkError",
    "RateLimitedError",
    "UnknownGenerationError",
    # Models
    "FeedbackRecord",
    "GenerationKind",
    "GenerationRequest",
    "GenerationResult",
    "Persona",
    "PersonaMetadata",
    "PersonaRecord",
    "PortraitImage",
    "ResearchNotes",
    # Components
    "GeminiTransport",
    "GenerationOrchestrator",
    "InferenceClient",
    "InferenceTransport",
    "QueueTicket",
    "RawResponse",
    "SingleFlightQueue",
    "validate",
]
