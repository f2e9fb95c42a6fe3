"""Logging setup for Archetype.

Text or JSON-lines output to stdout or a file, quiet third-party loggers, and
context-bound loggers (e.g. every line of one synthesis call carries its
``group_id``).
"""

from __future__ import annotations

from collections.abc import MutableMapping
from datetime import UTC, datetime
import json
import logging
import sys
from typing import Any

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# LogRecord attributes that are not caller-supplied context
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

# SDK/HTTP loggers that are chatty at INFO and below
_NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "urllib3",
    "google_genai",
    "google.auth",
    "asyncio",
)


class StructuredJSONFormatter(logging.Formatter):
    """Render each record as one JSON object.

    Keys: ``level``, ``message``, ``timestamp`` (UTC ISO-8601) and ``context``,
    which holds the record origin, exception details and any extra fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        context: dict[str, Any] = {
            "logger_name": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread_name": record.threadName,
            "process": record.process,
        }

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, _ = record.exc_info
            context["error_type"] = exc_type.__name__
            context["error_message"] = str(exc)
            context["stack_trace"] = record.exc_text or self.formatException(record.exc_info)

        context.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )

        return json.dumps(
            {
                "level": record.levelname,
                "message": record.getMessage(),
                "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
                "context": context,
            },
            default=str,
        )


class ContextAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges bound context with per-call ``extra``.

    The stock adapter replaces a call's ``extra`` with its own; here the bound
    context is the base and the call's fields are layered on top.
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def _build_handler(
    filename: str | None,
    structured: bool,
    format_string: str | None,
) -> logging.Handler:
    handler: logging.Handler = (
        logging.FileHandler(filename) if filename else logging.StreamHandler(sys.stdout)
    )
    if structured:
        handler.setFormatter(StructuredJSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    return handler


def _quiet_third_party_loggers() -> None:
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_logging(
    level: str = "INFO",
    format_string: str | None = None,
    filename: str | None = None,
    structured: bool = False,
) -> None:
    """Configure root logging, replacing any previous configuration.

    Args:
        level: Level name, case-insensitive.
        format_string: Text format (ignored when ``structured``).
        filename: Log file path; stdout when None.
        structured: Emit JSON lines via StructuredJSONFormatter.
    """
    logging.basicConfig(
        level=level.upper(),
        handlers=[_build_handler(filename, structured, format_string)],
        force=True,
    )
    _quiet_third_party_loggers()


def get_logger(name: str, **context: Any) -> logging.Logger | logging.LoggerAdapter:
    """Return the named logger, bound to ``context`` when any is given.

    Example:
        >>> log = get_logger(__name__, group_id="fw-3f9c2a1b7d4e")
        >>> log.info("Synthesized %d persona(s)", 3)
    """
    logger = logging.getLogger(name)
    if not context:
        return logger
    return ContextAdapter(logger, context)
