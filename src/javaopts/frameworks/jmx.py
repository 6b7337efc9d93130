"""Remote JMX monitoring and management."""

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

CONFIG_VAR = "JBP_CONFIG_JMX"


class JmxConfig(BaseModel):
    enabled: bool = False
    port: int = Field(default=5000, gt=0)


def load_jmx_config(environ: Mapping[str, str]) -> JmxConfig:
    data = parse_jbp_config(environ.get(CONFIG_VAR), source=CONFIG_VAR)
    config = validate_config(JmxConfig, data, source=CONFIG_VAR)

    updates: dict[str, object] = {}
    if (enabled := bpl_flag(environ, "BPL_JMX_ENABLED")) is not None:
        updates["enabled"] = enabled
    if (port := positive_int(environ.get("BPL_JMX_PORT"))) is not None:
        updates["port"] = port
    return config.model_copy(update=updates) if updates else config


def jmx_options(port: int) -> str:
    return " ".join(
        (
            "-Djava.rmi.server.hostname=127.0.0.1",
            "-Dcom.sun.management.jmxremote.authenticate=false",
            "-Dcom.sun.management.jmxremote.ssl=false",
            f"-Dcom.sun.management.jmxremote.port={port}",
            f"-Dcom.sun.management.jmxremote.rmi.port={port}",
        )
    )


def contribute_jmx(
    store: FragmentStore,
    environ: Mapping[str, str],
    app_dir: Path | None = None,
) -> Fragment | None:
    """Write JMX system properties at priority 29 when JMX is enabled."""
    del app_dir
    config = load_jmx_config(environ)
    if not config.enabled:
        return None
    logger.info("JMX enabled on port %d", config.port)
    return write_fragment(store, Priority.JMX, "jmx", jmx_options(config.port))
