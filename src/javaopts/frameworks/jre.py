"""Base JVM options contributed by the JRE component."""

from __future__ import annotations

from typing import TYPE_CHECKING

from javaopts.fragment import Priority
from javaopts.store import write_fragment

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from javaopts.fragment import Fragment
    from javaopts.store import FragmentStore

# Standard options for every OpenJDK-like JRE. java.ext.dirs is left to the
# security provider frameworks, which contribute their own values.
BASE_OPTIONS: tuple[str, ...] = ("-Djava.io.tmpdir=$TMPDIR",)


def contribute_jre(
    store: FragmentStore,
    environ: Mapping[str, str],
    app_dir: Path | None = None,
) -> Fragment:
    """Write the JRE's base options at priority 5 (always contributes)."""
    del environ, app_dir
    return write_fragment(store, Priority.JRE, "jre", " ".join(BASE_OPTIONS))
