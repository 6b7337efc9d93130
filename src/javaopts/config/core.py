# src/javaopts/config/core.py

"""Core configuration schema and resolution.

- Single source of truth for fields, defaults and validation (`Settings`)
- Immutable runtime payload (`FrozenConfig`)
- Layered resolution with audit tracking (`SourceMap`)
"""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass
from enum import Enum
from functools import cache
import os
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, overload
import warnings

from pydantic import BaseModel, Field, ValidationError, field_validator

from javaopts.errors import ConfigurationError

from .utils import ENV_PREFIX, field_spec_hint, get_config_path, should_emit_debug

if TYPE_CHECKING:
    from collections.abc import Mapping

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

_DIRECTORY_NAME = re.compile(r"[A-Za-z0-9_.-]+")

# --- Schema (Pydantic wall) ---


class Settings(BaseModel):
    """Pydantic schema for configuration validation and defaults."""

    # Staging-time deps root; falls back to $DEPS_DIR when unset
    deps_dir: str | None = Field(default=None)
    deps_index: str = Field(default="0", min_length=1)
    store_dirname: str = Field(default="java_opts", min_length=1)

    strict: bool = Field(default=False)

    profile_script_name: str = Field(default="00_java_opts.sh", min_length=1)
    launcher_command: str = Field(default="javaopts", min_length=1)

    log_level: LogLevel = Field(default="INFO")

    model_config = {"extra": "allow"}  # Preserve unknown keys, warn below

    @field_validator("deps_dir", mode="before")
    @classmethod
    def normalize_deps_dir(cls, v: Any) -> Any:
        """Trim whitespace and map empty strings to None."""
        if isinstance(v, str):
            s = v.strip()
            return s or None
        return v

    @field_validator("deps_index", "store_dirname", mode="before")
    @classmethod
    def require_plain_directory_name(cls, v: Any) -> Any:
        """Allow only ``[A-Za-z0-9_.-]`` names; both are rendered into shell."""
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        if isinstance(v, str):
            v = v.strip()
            if not _DIRECTORY_NAME.fullmatch(v) or v in {".", ".."}:
                raise ValueError(f"must be a plain directory name, got {v!r}")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Accept any casing for the log level."""
        if isinstance(v, str):
            return v.strip().upper()
        return v


@cache
def _default_settings() -> dict[str, Any]:
    return Settings().model_dump()


# --- Immutable runtime payload ---


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration passed to the store, resolver and CLI."""

    deps_dir: str | None
    deps_index: str
    store_dirname: str
    strict: bool
    profile_script_name: str
    launcher_command: str
    log_level: LogLevel
    extra: Mapping[str, Any]

    def store_dir(self, environ: Mapping[str, str] | None = None) -> Path:
        """Return ``<deps_dir>/<deps_index>/<store_dirname>``.

        Raises:
            ConfigurationError: If neither ``deps_dir`` nor ``$DEPS_DIR`` is set.
        """
        env = os.environ if environ is None else environ
        deps_dir = self.deps_dir or env.get("DEPS_DIR")
        if not deps_dir:
            raise ConfigurationError(
                "No deps directory configured",
                hint="Export DEPS_DIR or " + field_spec_hint("deps_dir"),
            )
        return Path(deps_dir) / self.deps_index / self.store_dirname

    def runtime_store_dir(self) -> str:
        """Store location as the launch-time shell sees it."""
        return f"$DEPS_DIR/{self.deps_index}/{self.store_dirname}"


# --- Audit types ---


class Origin(str, Enum):
    """Source origin for configuration field values."""

    DEFAULT = "default"
    PROJECT = "project"
    ENV = "env"
    OVERRIDES = "overrides"


@dataclass(frozen=True)
class FieldOrigin:
    """Tracks the origin and context of a configuration field value."""

    origin: Origin
    env_key: str | None = None  # e.g., "JAVAOPTS_STRICT"
    file: str | None = None  # e.g., "./javaopts.toml"


SourceMap = dict[str, FieldOrigin]


# --- Public resolution API ---


@overload
def resolve_config(
    overrides: Mapping[str, Any] | None = ...,
    *,
    explain: Literal[True],
) -> tuple[FrozenConfig, SourceMap]: ...


@overload
def resolve_config(
    overrides: Mapping[str, Any] | None = ...,
    *,
    explain: Literal[False] = ...,
) -> FrozenConfig: ...


def resolve_config(
    overrides: Mapping[str, Any] | None = None,
    *,
    explain: bool = False,
) -> FrozenConfig | tuple[FrozenConfig, SourceMap]:
    """Resolve configuration from all sources into a FrozenConfig.

    Precedence: defaults < project file < .env < env < overrides. A ``.env``
    file only supplies ``JAVAOPTS_*`` settings; it never changes ``os.environ``.

    Args:
        overrides: Programmatic configuration overrides.
        explain: If True, return ``(config, source_map)`` for audit.

    Returns:
        FrozenConfig, or ``(FrozenConfig, SourceMap)`` if explain=True.

    Raises:
        ConfigurationError: If validation fails.
    """
    from .loaders import load_env, load_project

    merged, sources = _resolve_layers(
        overrides=overrides or {},
        env=load_env(),
        project=load_project(),
    )

    try:
        settings = Settings.model_validate(merged)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "")
        # Remove "Value error, " prefix if present (Pydantic standard wrapper)
        if msg.startswith("Value error, "):
            msg = msg[13:]
        raise ConfigurationError(
            f"Configuration validation failed for {field or 'config'}: {msg}",
            hint=field_spec_hint(field) if field in Settings.model_fields else None,
        ) from e

    frozen = _freeze(settings, merged)

    if not explain and should_emit_debug():
        with suppress(Exception):
            warnings.warn(
                "Config audit\n" + audit_text(frozen, sources),
                stacklevel=2,
            )

    return (frozen, sources) if explain else frozen


# --- Internal helpers ---


def _freeze(settings: Settings, merged: Mapping[str, Any]) -> FrozenConfig:
    known_fields = set(Settings.model_fields.keys())
    extra = {k: v for k, v in merged.items() if k not in known_fields}
    for name in extra:
        warnings.warn(
            f"Configuration: unknown key '{name}' ignored", UserWarning, stacklevel=3
        )

    return FrozenConfig(
        deps_dir=settings.deps_dir,
        deps_index=settings.deps_index,
        store_dirname=settings.store_dirname,
        strict=settings.strict,
        profile_script_name=settings.profile_script_name,
        launcher_command=settings.launcher_command,
        log_level=settings.log_level,
        extra=extra,
    )


def _resolve_layers(
    *,
    overrides: Mapping[str, Any],
    env: Mapping[str, Any],
    project: Mapping[str, Any],
) -> tuple[dict[str, Any], SourceMap]:
    """Merge layers with last-wins precedence while recording origins."""
    layers = [
        (Origin.PROJECT, project),
        (Origin.ENV, env),
        (Origin.OVERRIDES, overrides),
    ]

    out: dict[str, Any] = {}
    src: SourceMap = {}

    for k, v in _default_settings().items():
        out[k] = v
        src[k] = FieldOrigin(origin=Origin.DEFAULT)

    for origin, payload in layers:
        for k, v in payload.items():
            out[k] = v
            if origin is Origin.ENV:
                src[k] = FieldOrigin(origin=origin, env_key=f"{ENV_PREFIX}{k.upper()}")
            elif origin is Origin.PROJECT:
                src[k] = FieldOrigin(origin=origin, file=str(get_config_path()))
            else:
                src[k] = FieldOrigin(origin=origin)

    return out, src


# --- Audit helpers ---


def _origin_label(field: str, where: FieldOrigin) -> str:
    match where.origin:
        case Origin.ENV:
            return f"env:{where.env_key or ENV_PREFIX + field.upper()}"
        case Origin.PROJECT:
            return f"file:{where.file or 'javaopts.toml'}"
        case _:
            return str(where.origin.value)


def audit_lines(cfg: FrozenConfig, sources: SourceMap) -> list[str]:
    """Produce human-readable ``field: origin`` lines in schema order."""
    lines: list[str] = []
    for field in Settings.model_fields:
        fo = sources.get(field)
        if fo is None:
            continue
        lines.append(f"{field}: {_origin_label(field, fo)}")
    for k in sorted(k for k in cfg.extra if k in sources):
        lines.append(f"{k}: {_origin_label(k, sources[k])} (unknown)")
    return lines


def audit_text(cfg: FrozenConfig, sources: SourceMap) -> str:
    """Format audit as a single string suitable for printing/logging."""
    return "\n".join(audit_lines(cfg, sources))


def to_dict(cfg: FrozenConfig) -> dict[str, Any]:
    """Plain dict view for structured logging and ``config show``."""
    return {
        "deps_dir": cfg.deps_dir,
        "deps_index": cfg.deps_index,
        "store_dirname": cfg.store_dirname,
        "strict": cfg.strict,
        "profile_script_name": cfg.profile_script_name,
        "launcher_command": cfg.launcher_command,
        "log_level": cfg.log_level,
        "extra": dict(cfg.extra),
    }
