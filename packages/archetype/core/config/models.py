"""Configuration models for Archetype."""

from __future__ import annotations

from pathlib import Path
from typing import Self

from pydantic import BaseModel, ConfigDict, Field

from archetype.core.generation.backoff import BackoffPolicy
from archetype.core.generation.models import DEFAULT_MODELS, GenerationKind
from archetype.core.generation.serializer import DEFAULT_SPACING_S


class GenerationConfig(BaseModel):
    """Inference service configuration for the generation core."""

    model_config = ConfigDict(extra="forbid")

    persona_model: str = Field(
        default=DEFAULT_MODELS[GenerationKind.PERSONA_SYNTHESIS],
        description="Model used for persona synthesis",
    )

    feedback_model: str = Field(
        default=DEFAULT_MODELS[GenerationKind.FEEDBACK_SYNTHESIS],
        description="Model used for feedback synthesis",
    )

    portrait_model: str = Field(
        default=DEFAULT_MODELS[GenerationKind.PORTRAIT_SYNTHESIS],
        description="Model used for portrait synthesis",
    )

    text_backoff: BackoffPolicy = Field(
        default_factory=lambda: BackoffPolicy(base_delay_s=6.0, max_retries=3),
        description="Backoff policy for persona and feedback requests",
    )

    image_backoff: BackoffPolicy = Field(
        default_factory=lambda: BackoffPolicy(base_delay_s=7.0, max_retries=2),
        description="Backoff policy for portrait requests",
    )

    portrait_spacing_s: float = Field(
        default=DEFAULT_SPACING_S,
        ge=0.0,
        description="Delay before each queued portrait call (requests-per-minute guard)",
    )

    portrait_aspect_ratio: str = Field(default="1:1", description="Portrait aspect ratio")

    request_timeout_s: float | None = Field(
        default=None, gt=0, description="Per-request timeout (None = SDK default)"
    )

    def models_by_kind(self) -> dict[GenerationKind, str]:
        """Model identifier per generation kind."""
        return {
            GenerationKind.PERSONA_SYNTHESIS: self.persona_model,
            GenerationKind.FEEDBACK_SYNTHESIS: self.feedback_model,
            GenerationKind.PORTRAIT_SYNTHESIS: self.portrait_model,
        }


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = Field(default=False, description="Emit structured JSON log lines")
    filename: str | None = Field(default=None, description="Log file (None = stdout)")


class AppConfig(BaseModel):
    """Application-level configuration."""

    model_config = ConfigDict(extra="ignore")  # Forward compatibility

    api_key: str | None = Field(
        default=None,
        repr=False,
        description="Gemini API key (falls back to GEMINI_API_KEY, GOOGLE_API_KEY, API_KEY)",
    )
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def default_path(cls) -> Path:
        """Default path for application config."""
        return Path("config.json")

    @classmethod
    def load_or_default(cls, path: Path | str | None = None) -> Self:
        """Load config from path (or the default path), with environment fallbacks.

        Args:
            path: Path to config file, or None to use default

        Returns:
            Loaded config instance (defaults when the file does not exist)

        Raises:
            ValidationError: If config is invalid
        """
        from archetype.core.config.loader import load_app_config

        return load_app_config(path)
