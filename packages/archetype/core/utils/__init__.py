"""Shared utilities for Archetype."""

from archetype.core.utils.logging import (
    ContextAdapter,
    StructuredJSONFormatter,
    configure_logging,
    get_logger,
)

__all__ = [
    "ContextAdapter",
    "StructuredJSONFormatter",
    "configure_logging",
    "get_logger",
]
