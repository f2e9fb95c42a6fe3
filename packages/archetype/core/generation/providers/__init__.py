"""Inference transports for the generation core."""

from archetype.core.generation.providers.base import InferenceTransport, RawResponse
from archetype.core.generation.providers.gemini import GeminiTransport

__all__ = [
    "InferenceTransport",
    "RawResponse",
    "GeminiTransport",
]
