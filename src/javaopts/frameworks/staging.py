"""Run every producer once during staging."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from javaopts.errors import JavaOptsError

from .debug import contribute_debug
from .java_opts import contribute_java_opts
from .jmx import contribute_jmx
from .jre import contribute_jre

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping, Sequence
    from pathlib import Path

    from javaopts.fragment import Fragment
    from javaopts.store import FragmentStore

    from .base import Producer

logger = logging.getLogger(__name__)

DEFAULT_PRODUCERS: tuple[tuple[str, Producer], ...] = (
    ("jre", contribute_jre),
    ("debug", contribute_debug),
    ("jmx", contribute_jmx),
    ("java_opts", contribute_java_opts),
)


def stage(
    store: FragmentStore,
    environ: Mapping[str, str] | None = None,
    app_dir: Path | None = None,
    *,
    producers: Sequence[tuple[str, Producer]] = DEFAULT_PRODUCERS,
    mandatory: Collection[str] = (),
) -> list[Fragment]:
    """Invoke each producer and collect the fragments they wrote.

    A failing producer only loses its own contribution: the error is
    logged and staging continues, unless its name is in ``mandatory``.

    Args:
        store: Destination store shared by all producers.
        environ: Staging environment (default ``os.environ``).
        app_dir: Application root, for producers that read config files.
        producers: ``(name, function)`` pairs, run in order.
        mandatory: Producer names whose failure aborts staging.

    Returns:
        The fragments written, in producer order.

    Raises:
        JavaOptsError: If a mandatory producer fails.
    """
    env = os.environ if environ is None else environ
    written: list[Fragment] = []
    for name, produce in producers:
        try:
            fragment = produce(store, env, app_dir)
        except JavaOptsError as e:
            if name in mandatory:
                raise
            logger.warning("Skipping %s JAVA_OPTS contribution: %s", name, e)
            continue
        if fragment is None:
            logger.debug("%s contributed no JAVA_OPTS", name)
            continue
        written.append(fragment)
    logger.info(
        "Staged %d JAVA_OPTS fragment(s): %s",
        len(written),
        ", ".join(f.key for f in written) or "none",
    )
    return written
