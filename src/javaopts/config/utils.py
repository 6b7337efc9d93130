# src/javaopts/config/utils.py

"""Configuration utilities and shared constants.

Pure helpers that can be imported without creating circular dependencies
between the schema (`core`) and the loaders.
"""

from __future__ import annotations

import os
from pathlib import Path

# --- Constants ---

ENV_PREFIX = "JAVAOPTS_"

CONFIG_PATH_VAR = "JAVAOPTS_CONFIG_PATH"
DEBUG_CONFIG_VAR = "JAVAOPTS_DEBUG_CONFIG"

DEFAULT_CONFIG_FILE = "javaopts.toml"

_TRUTHY = {"1", "true", "yes", "on"}


# --- Path Utilities ---


def get_config_path() -> Path:
    """Return the project config file path, honoring ``JAVAOPTS_CONFIG_PATH``."""
    if override := os.environ.get(CONFIG_PATH_VAR):
        return Path(override)
    return Path.cwd() / DEFAULT_CONFIG_FILE


# --- Environment Utilities ---


def coerce_bool(value: str) -> bool:
    """Convert a string to bool using common conventions."""
    return value.strip().lower() in _TRUTHY


def should_emit_debug() -> bool:
    """Return True when the config audit should be emitted as a warning."""
    return coerce_bool(os.environ.get(DEBUG_CONFIG_VAR, ""))


# --- Field Specification Helpers ---


def field_spec_hint(field: str) -> str:
    """Return a compact hint for setting a config field via env or file."""
    env_key = f"{ENV_PREFIX}{field.upper()}"
    return f"Set {env_key} or [tool.javaopts] {field} in {DEFAULT_CONFIG_FILE}."
