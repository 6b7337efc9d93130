# src/javaopts/config/loaders.py

"""Configuration loaders for environment and files.

Pure data loading: each loader returns a plain dictionary that the core
resolver merges and validates. No validation happens here.
"""

from __future__ import annotations

import logging
import os
import tomllib
from typing import TYPE_CHECKING, Any

from . import utils

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_TOOL_NAME = "javaopts"

# Meta/control variables that steer resolution but aren't config fields
META_ENV_FIELDS = {"config_path", "debug_config"}


# --- Environment Loading ---


def load_dotenv_settings() -> dict[str, str]:
    """Read ``JAVAOPTS_*`` keys from the nearest ``.env`` file.

    Values are returned, never exported: the environment the resolver
    expands against stays exactly what the process was started with.
    """
    from dotenv import dotenv_values, find_dotenv

    path = find_dotenv(usecwd=True)
    if not path:
        return {}
    try:
        values = dotenv_values(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Ignoring unreadable .env file %s: %s", path, e)
        return {}
    return {
        k: v
        for k, v in values.items()
        if k.startswith(utils.ENV_PREFIX) and v is not None
    }


def load_env() -> Mapping[str, Any]:
    """Load configuration from ``JAVAOPTS_*`` environment variables.

    ``.env`` settings fill in keys the process environment does not set.
    Performs schema-informed type coercion for bool fields using `Settings`
    and skips meta/control variables.
    """
    from .core import Settings  # local import to keep loaders import-light

    config: dict[str, Any] = {}
    for key, value in {**load_dotenv_settings(), **os.environ}.items():
        if not key.startswith(utils.ENV_PREFIX):
            continue
        field_name = key[len(utils.ENV_PREFIX) :].lower()
        if field_name in META_ENV_FIELDS:
            continue
        info = Settings.model_fields.get(field_name)
        if info is not None and info.annotation is bool:
            config[field_name] = utils.coerce_bool(value)
        else:
            config[field_name] = value
    return config


# --- File loading ---


def _read_toml(path: Path) -> dict[str, Any]:
    """Read a TOML file, returning an empty dict when missing or invalid."""
    if not path.exists():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}


def load_project() -> Mapping[str, Any]:
    """Load the ``[tool.javaopts]`` table from the project config file."""
    data = _read_toml(utils.get_config_path())
    section = data.get("tool", {}).get(CONFIG_TOOL_NAME, {})
    return dict(section) if isinstance(section, dict) else {}
