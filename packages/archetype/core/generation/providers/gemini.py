"""Gemini transport implementation."""

from __future__ import annotations

import base64
from collections.abc import Sequence
import logging
from typing import Any

from google import genai
from google.genai import types

from archetype.core.generation.models import GenerationRequest
from archetype.core.generation.providers.base import RawResponse

logger = logging.getLogger(__name__)

DEFAULT_ASPECT_RATIO = "1:1"


class GeminiTransport:
    """Async transport over the google-genai SDK.

    One ``send`` issues exactly one ``generate_content`` call. SDK errors
    (``google.genai.errors.APIError``) and httpx transport errors propagate
    unmodified so the backoff policy can classify them.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        client: genai.Client | None = None,
        timeout_s: float | None = None,
        aspect_ratio: str = DEFAULT_ASPECT_RATIO,
    ) -> None:
        """Initialize Gemini transport.

        Args:
            api_key: Gemini API key (ignored when ``client`` is given)
            client: Pre-built SDK client (tests inject a mock here)
            timeout_s: Per-request timeout in seconds
            aspect_ratio: Aspect ratio requested for portraits
        """
        if client is None:
            http_options = None
            if timeout_s is not None:
                http_options = types.HttpOptions(timeout=int(timeout_s * 1000))
            client = genai.Client(api_key=api_key, http_options=http_options)
        self._client = client
        self._aspect_ratio = aspect_ratio

    async def send(self, request: GenerationRequest) -> RawResponse:
        config = _build_content_config(request, aspect_ratio=self._aspect_ratio)
        logger.debug("Gemini generate_content (kind=%s, model=%s)", request.kind.value, request.model)

        response = await self._client.aio.models.generate_content(
            model=request.model,
            contents=request.payload,
            config=config,
        )

        if request.kind.is_image():
            candidates = getattr(response, "candidates", None) or []
            data, mime_type = _extract_first_image(candidates)
            return RawResponse(inline_data=data, mime_type=mime_type, model=request.model)

        return RawResponse(text=getattr(response, "text", None), model=request.model)


def _build_content_config(
    request: GenerationRequest,
    *,
    aspect_ratio: str,
) -> types.GenerateContentConfig:
    if request.kind.is_image():
        return types.GenerateContentConfig(
            response_modalities=["IMAGE"],
            image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
        )
    config_kwargs: dict[str, Any] = {
        "response_mime_type": "application/json",
        "response_json_schema": request.response_schema,
    }
    if request.system_instruction:
        config_kwargs["system_instruction"] = request.system_instruction
    return types.GenerateContentConfig(**config_kwargs)


def _extract_first_image(candidates: Sequence[Any]) -> tuple[bytes | None, str | None]:
    """Return the first inline-data part across candidates."""
    for candidate in candidates:
        content = getattr(candidate, "content", None)
        parts = getattr(content, "parts", None) or []
        for part in parts:
            inline_data = getattr(part, "inline_data", None)
            data = getattr(inline_data, "data", None) if inline_data else None
            if data is None:
                continue
            if isinstance(data, str):
                data = base64.b64decode(data)
            if isinstance(data, (bytes, bytearray)):
                return bytes(data), getattr(inline_data, "mime_type", None)
    return None, None
