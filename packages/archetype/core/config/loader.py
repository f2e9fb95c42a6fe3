"""Load AppConfig from JSON or YAML, with the API key falling back to the environment."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from archetype.core.config.models import AppConfig
from archetype.core.utils.logging import configure_logging as _configure_logging

logger = logging.getLogger(__name__)

# Checked in order; the first non-empty value wins
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")

_FORMATS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}

_DEFAULT_APP_CONFIG_PATH = Path("config.json")
_app_config_cache: AppConfig | None = None


def detect_format(file_path: Path | str) -> str:
    """Map a config file extension to ``"json"`` or ``"yaml"``.

    Raises:
        ValueError: For any other extension

    Example:
        >>> detect_format("settings.YML")
        'yaml'
    """
    suffix = Path(file_path).suffix.lower()
    try:
        return _FORMATS[suffix]
    except KeyError:
        raise ValueError(f"Unsupported config format: {suffix or '<none>'}") from None


def _parse(path: Path, fmt: str) -> Any:
    text = path.read_text(encoding="utf-8")
    match fmt:
        case "json":
            try:
                return json.loads(text)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {path}: {e}") from e
        case "yaml":
            try:
                # Empty documents parse to None
                return yaml.safe_load(text) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
    raise ValueError(f"Unsupported config format: {fmt}")


def load_config(path: str | Path) -> dict[str, Any]:
    """Read a config file into a plain mapping.

    Args:
        path: ``.json``, ``.yaml`` or ``.yml`` file

    Raises:
        FileNotFoundError: If the file is missing
        ValueError: On an unknown extension, unparseable content or a non-mapping root
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Config file does not exist: {path}")

    content = _parse(path, detect_format(path))
    if not isinstance(content, dict):
        raise ValueError(f"Config root must be a mapping in {path}, got {type(content).__name__}")
    return content


def load_app_config(path: str | Path | None = None) -> AppConfig:
    """Load and validate the application config.

    A missing file yields defaults. The default path (``config.json`` in the
    working directory) is read once and cached; explicit paths are always read.

    Raises:
        ValidationError: If the file content does not fit AppConfig
    """
    global _app_config_cache

    is_default = path is None or Path(path) == _DEFAULT_APP_CONFIG_PATH
    if is_default and _app_config_cache is not None:
        return _app_config_cache

    source = Path(path) if path is not None else _DEFAULT_APP_CONFIG_PATH
    if source.is_file():
        config = AppConfig.model_validate(load_config(source))
        logger.debug("Loaded app config from %s", source)
    else:
        config = AppConfig()

    config = _with_env_api_key(config)
    if is_default:
        _app_config_cache = config
    return config


def clear_app_config_cache() -> None:
    """Forget the cached default config (next load re-reads the file)."""
    global _app_config_cache
    _app_config_cache = None


def get_api_key() -> str | None:
    """First non-empty API key among API_KEY_ENV_VARS, or None."""
    for name in API_KEY_ENV_VARS:
        if value := os.getenv(name):
            logger.debug("Using API key from %s", name)
            return value
    return None


def _with_env_api_key(config: AppConfig) -> AppConfig:
    if config.api_key:
        return config
    api_key = get_api_key()
    return config if api_key is None else config.model_copy(update={"api_key": api_key})


def configure_logging(config: AppConfig | None = None) -> None:
    """Apply the ``logging`` section of an AppConfig (the default config when None)."""
    settings = (config or load_app_config()).logging
    _configure_logging(
        level=settings.level,
        format_string=settings.format,
        filename=settings.filename,
        structured=settings.structured,
    )
