"""Orchestrator factory wiring the generation core from app config."""

from __future__ import annotations

from archetype.core.config.models import AppConfig
from archetype.core.generation.client import InferenceClient
from archetype.core.generation.errors import AuthInvalidError
from archetype.core.generation.orchestrator import GenerationOrchestrator
from archetype.core.generation.providers.gemini import GeminiTransport
from archetype.core.generation.serializer import SingleFlightQueue


def create_orchestrator(app_config: AppConfig) -> GenerationOrchestrator:
    """Create a configured orchestrator backed by Gemini.

    Each call builds its own portrait queue; share the returned orchestrator
    to share the single-flight lane.

    Raises:
        AuthInvalidError: If no API key is configured
    """
    if not app_config.api_key:
        raise AuthInvalidError(
            "No Gemini API key configured (set api_key or GEMINI_API_KEY / GOOGLE_API_KEY)"
        )

    gen = app_config.generation
    transport = GeminiTransport(
        api_key=app_config.api_key,
        timeout_s=gen.request_timeout_s,
        aspect_ratio=gen.portrait_aspect_ratio,
    )
    client = InferenceClient(
        transport,
        text_policy=gen.text_backoff,
        image_policy=gen.image_backoff,
    )
    return GenerationOrchestrator(
        client,
        SingleFlightQueue(spacing_s=gen.portrait_spacing_s),
        models=gen.models_by_kind(),
    )
