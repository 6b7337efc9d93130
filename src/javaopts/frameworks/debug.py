"""Remote debugging through the Java Debug Wire Protocol agent."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from javaopts.fragment import Priority
from javaopts.store import write_fragment

from .base import bpl_flag, parse_jbp_config, positive_int, validate_config

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from javaopts.fragment import Fragment
    from javaopts.store import FragmentStore

logger = logging.getLogger(__name__)

CONFIG_VAR = "JBP_CONFIG_DEBUG"


class DebugConfig(BaseModel):
    """``JBP_CONFIG_DEBUG`` schema. Disabled unless asked for."""

    enabled: bool = False
    port: int = Field(default=8000, gt=0)
    suspend: bool = False


def load_debug_config(environ: Mapping[str, str]) -> DebugConfig:
    """Resolve debug settings; ``BPL_DEBUG_*`` variables win over JBP config."""
    data = parse_jbp_config(environ.get(CONFIG_VAR), source=CONFIG_VAR)
    config = validate_config(DebugConfig, data, source=CONFIG_VAR)

    updates: dict[str, object] = {}
    if (enabled := bpl_flag(environ, "BPL_DEBUG_ENABLED")) is not None:
        updates["enabled"] = enabled
    if (port := positive_int(environ.get("BPL_DEBUG_PORT"))) is not None:
        updates["port"] = port
    return config.model_copy(update=updates) if updates else config


def debug_options(config: DebugConfig) -> str:
    suspend = "y" if config.suspend else "n"
    return (
        "-agentlib:jdwp=transport=dt_socket,server=y,"
        f"address={config.port},suspend={suspend}"
    )


def contribute_debug(
    store: FragmentStore,
    environ: Mapping[str, str],
    app_dir: Path | None = None,
) -> Fragment | None:
    """Write the JDWP agent option at priority 20 when debugging is enabled."""
    del app_dir
    config = load_debug_config(environ)
    if not config.enabled:
        return None
    logger.info(
        "Debugging enabled on port %d%s",
        config.port,
        ", suspended on start" if config.suspend else "",
    )
    return write_fragment(store, Priority.DEBUG, "debug", debug_options(config))
