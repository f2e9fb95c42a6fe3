"""Configuration management for Archetype."""

from archetype.core.config.loader import (
    configure_logging,
    get_api_key,
    load_app_config,
    load_config,
)
from archetype.core.config.models import AppConfig, GenerationConfig, LoggingConfig

__all__ = [
    # Loaders
    "load_config",
    "load_app_config",
    "get_api_key",
    "configure_logging",
    # Models
    "AppConfig",
    "GenerationConfig",
    "LoggingConfig",
]
