"""Shared helpers for fragment producers.

A producer is a plain function with the `Producer` signature. It reads
its configuration from the staging environment (and optionally the
application directory), writes at most one fragment and returns it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel, ValidationError
import yaml

from javaopts.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from javaopts.fragment import Fragment
    from javaopts.store import FragmentStore


class Producer(Protocol):
    """Callable contributing one JAVA_OPTS fragment during staging."""

    def __call__(
        self,
        store: FragmentStore,
        environ: Mapping[str, str],
        app_dir: Path | None,
    ) -> Fragment | None: ...


def parse_jbp_config(raw: str | None, *, source: str) -> dict[str, Any]:
    """Parse a ``JBP_CONFIG_*`` style YAML value into a mapping.

    Accepted shapes:
    - a mapping: ``{enabled: true, port: 8000}``
    - a quoted YAML string holding a mapping: ``'{enabled: true}'``
    - the legacy list of single-key mappings: ``[enabled: true, port: 8000]``

    Raises:
        ConfigurationError: If the value is not valid YAML or has another shape.
    """
    if raw is None or not raw.strip():
        return {}
    try:
        data = yaml.safe_load(raw)
        if isinstance(data, str):
            data = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse {source}: {e}",
            hint=f"{source} must be YAML, e.g. '{{enabled: true}}'.",
        ) from e

    if data is None:
        return {}
    if isinstance(data, dict):
        return {str(k): v for k, v in data.items()}
    if isinstance(data, list):
        merged: dict[str, Any] = {}
        for item in data:
            if isinstance(item, dict):
                merged.update({str(k): v for k, v in item.items()})
        return merged
    raise ConfigurationError(
        f"Unexpected {source} value of type {type(data).__name__}",
        hint=f"{source} must be a YAML mapping.",
    )


def validate_config[M: BaseModel](
    model: type[M], data: dict[str, Any], *, source: str
) -> M:
    """Validate a parsed mapping against a pydantic model."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(p) for p in err.get("loc", ())) or "value"
        raise ConfigurationError(
            f"Invalid {source} setting '{field}': {err.get('msg', '')}"
        ) from e


def bpl_flag(environ: Mapping[str, str], name: str) -> bool | None:
    """Read a Cloud Native Buildpacks style boolean toggle.

    ``true``/``1`` and ``false``/``0`` are decisive; anything else (including
    absence) returns None so the caller falls back to ``JBP_CONFIG_*``.
    """
    value = environ.get(name, "").strip().lower()
    if value in {"true", "1"}:
        return True
    if value in {"false", "0"}:
        return False
    return None


def positive_int(value: str | None) -> int | None:
    """Parse a strictly positive integer, or return None."""
    if value is None:
        return None
    try:
        number = int(value.strip())
    except ValueError:
        return None
    return number if number > 0 else None
