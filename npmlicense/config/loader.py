"""Helpers for loading dependency configuration from TOML/JSON sources.

This module provides a single entry point `load_deps_config` that accepts
various configuration sources:

* None -> default DepsConfig
* dict -> validated DepsConfig
* Path / path-like string -> load .toml/.json from filesystem
* Inline JSON/TOML strings
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from npmlicense.config.schema import DepsConfig

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover - Python <3.11 path
    import tomli as tomllib

logger = logging.getLogger("npmlicense.config.loader")

ConfigSource = Union[str, Path, Dict[str, Any], None]

# Tables that may wrap the dependency section in a larger project config.
_SECTION_KEYS = ("dependency", "deps")


class ConfigError(ValueError):
    """Configuration could not be read or failed validation."""


def _unwrap_section(data: Dict[str, Any]) -> Dict[str, Any]:
    for key in _SECTION_KEYS:
        section = data.get(key)
        if isinstance(section, dict):
            logger.debug("Using [%s] section of configuration", key)
            return section
    return data


def _sniff_format(text: str) -> str:
    stripped = text.lstrip()
    if stripped.startswith("{"):
        return "json"
    if stripped.startswith("["):
        # Either a JSON array or a TOML table header.
        try:
            json.loads(stripped)
        except json.JSONDecodeError:
            return "toml"
        return "json"
    return "toml"


def _build(data: Dict[str, Any]) -> DepsConfig:
    try:
        return DepsConfig.model_validate(_unwrap_section(data))
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def load_deps_config(source: ConfigSource) -> DepsConfig:
    """Load DepsConfig from various configuration sources.

    Args:
        source: One of:
            * None: returns the default DepsConfig
            * dict: treated as already-parsed configuration mapping
            * str/Path: either a filesystem path to a .toml/.json file,
              or an inline TOML/JSON string (auto-detected)

    Returns:
        DepsConfig instance.

    Raises:
        ConfigError: If the source cannot be read, parsed or validated.
    """
    if source is None:
        logger.debug("No config source provided; using default DepsConfig")
        return DepsConfig()

    if isinstance(source, dict):
        logger.debug("Loading DepsConfig from provided dict")
        return _build(source)

    if not isinstance(source, (str, Path)):
        raise TypeError(f"Unsupported config source type: {type(source)!r}")

    text: Optional[str] = None
    fmt: Optional[str] = None
    path = Path(source)

    try:
        is_file = path.is_file()
    except (OSError, ValueError):
        # Long inline strings may not be valid path names at all.
        is_file = False

    if is_file:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read configuration {path}: {e}") from e
        suffix = path.suffix.lower()
        if suffix in {".toml", ".tml"}:
            fmt = "toml"
        elif suffix == ".json":
            fmt = "json"
        else:
            fmt = _sniff_format(text)
        logger.info("Loading configuration from file: %s (fmt=%s)", path, fmt)
    elif isinstance(source, Path):
        raise ConfigError(f"Configuration file not found: {source}")
    else:
        text = source
        fmt = _sniff_format(text)
        logger.info("Loading configuration from inline %s string", fmt)

    try:
        data = json.loads(text) if fmt == "json" else tomllib.loads(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot parse {fmt} configuration: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("Top-level configuration must be a mapping/dict")

    return _build(data)


__all__ = ["ConfigError", "ConfigSource", "load_deps_config"]
