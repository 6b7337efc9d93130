"""Launch-time consumer: assemble JAVA_OPTS and the profile.d shim.

`assemble` is the single operation the process launcher calls. The
profile.d script written by `write_profile_script` runs once per process
start, calls ``javaopts assemble`` against the runtime store location and
exports the result as ``JAVA_OPTS``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
import shlex
from typing import TYPE_CHECKING

from javaopts.config import resolve_config
from javaopts.errors import FragmentStoreError
from javaopts.resolver import RuntimeContext, resolve
from javaopts.store import DirectoryFragmentStore

if TYPE_CHECKING:
    from collections.abc import Mapping

    from javaopts.config import FrozenConfig

logger = logging.getLogger(__name__)

_PROFILE_TEMPLATE = """\
#!/bin/bash
# Assembles JAVA_OPTS from the fragments in {store_dir}
# in priority order. The inbound $JAVA_OPTS is captured by the assembler
# before any fragment is expanded.
__javaopts_value="$({command} assemble --store "{store_dir}")" \\
  && JAVA_OPTS="$__javaopts_value"
unset __javaopts_value
export JAVA_OPTS
"""


def assemble(
    store_dir: str | os.PathLike[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    strict: bool | None = None,
    config: FrozenConfig | None = None,
) -> str:
    """Return the fully assembled JAVA_OPTS for this process start.

    Args:
        store_dir: Fragment directory; defaults to the configured location
            under ``$DEPS_DIR``.
        environ: Launch environment (default ``os.environ``).
        strict: Override the configured strict mode.
        config: Pre-resolved configuration.

    Raises:
        ConfigurationError: If no store location can be determined.
        UnresolvedVariableError: In strict mode, on missing variables.
        FragmentStoreError: If the store cannot be read.
    """
    env = dict(os.environ if environ is None else environ)
    cfg = config or resolve_config()
    root = Path(store_dir) if store_dir is not None else cfg.store_dir(env)
    effective_strict = cfg.strict if strict is None else strict
    return resolve(
        DirectoryFragmentStore(root),
        RuntimeContext.from_environ(env),
        strict=effective_strict,
    )


def render_profile_script(config: FrozenConfig) -> str:
    """Render the profile.d shim for the configured store and command."""
    return _PROFILE_TEMPLATE.format(
        command=shlex.quote(config.launcher_command),
        store_dir=config.runtime_store_dir(),
    )


def write_profile_script(
    profile_dir: str | os.PathLike[str], config: FrozenConfig | None = None
) -> Path:
    """Write the profile.d script once, after every producer has run.

    Returns:
        Path of the written script.

    Raises:
        FragmentStoreError: If the script cannot be written.
    """
    cfg = config or resolve_config()
    path = Path(profile_dir) / cfg.profile_script_name
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_profile_script(cfg), encoding="utf-8")
        path.chmod(0o755)
    except OSError as e:
        raise FragmentStoreError(
            f"Failed to write {path.name}: {e}", path=path
        ) from e
    logger.debug("Created JAVA_OPTS assembly script %s", path)
    return path
