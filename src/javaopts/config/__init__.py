# src/javaopts/config/__init__.py

"""Configuration management.

Resolve once, freeze, then flow: settings are resolved at entry points
into an immutable `FrozenConfig` that is passed explicitly to the store,
the resolver and the launcher.

Key exports:
- resolve_config: Main API for configuration resolution
- FrozenConfig: Immutable configuration payload
- Settings: Pydantic schema for validation and defaults
"""

# ruff: noqa: I001

from .core import (
    FrozenConfig,
    Origin,
    FieldOrigin,
    Settings,
    SourceMap,
    audit_lines,
    audit_text,
    resolve_config,
    to_dict,
)
from .utils import field_spec_hint

__all__ = [  # noqa: RUF022
    "resolve_config",
    "FrozenConfig",
    "Settings",
    "Origin",
    "FieldOrigin",
    "SourceMap",
    "audit_lines",
    "audit_text",
    "to_dict",
    "field_spec_hint",
]
