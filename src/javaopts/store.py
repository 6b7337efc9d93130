"""Fragment store protocol and its directory and in-memory implementations.

Defines the `FragmentStore` protocol and `DirectoryFragmentStore`, which
keeps one plaintext file per fragment, named ``NN_name.opts`` so that a
plain lexical directory listing is already in priority order.
"""

from __future__ import annotations

from contextlib import suppress
import logging
import os
from pathlib import Path
import threading
from typing import TYPE_CHECKING, Protocol
import uuid

from javaopts.errors import FragmentStoreError
from javaopts.fragment import Fragment, parse_filename

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


class FragmentStore(Protocol):
    """Protocol for persisting fragments and reading them back in order."""

    def put(self, fragment: Fragment) -> None:
        """Write or overwrite the fragment keyed by ``(priority, name)``."""
        ...

    def get(self, priority: int, name: str) -> Fragment | None:
        """Return the stored fragment for a key, or None."""
        ...

    def all_ordered(self) -> list[Fragment]:
        """Return every fragment sorted by priority, then name."""
        ...


class DirectoryFragmentStore:
    """One file per fragment inside a single directory.

    Writes go to a uniquely named temp file in the same directory and are
    moved into place with ``os.replace``, so concurrent producers writing
    distinct keys never observe or clobber each other's partial output.
    Layout::

        <root>/05_jre.opts
        <root>/20_debug.opts
        <root>/99_user_java_opts.opts
    """

    def __init__(self, root: str | os.PathLike[str]) -> None:
        """Initialize the store rooted at a directory (created lazily)."""
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, fragment: Fragment) -> Path:
        return self._root / fragment.filename

    def put(self, fragment: Fragment) -> None:
        """Persist a fragment atomically via temp file rename."""
        target = self.path_for(fragment)
        tmp = self._root / f".{fragment.key}.{uuid.uuid4().hex}.tmp"
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            tmp.write_text(fragment.content, encoding="utf-8")
            tmp.replace(target)
        except OSError as e:
            with suppress(OSError):
                tmp.unlink()
            raise FragmentStoreError(
                f"Failed to write {fragment.filename}: {e}",
                path=target,
                hint="Check that the deps directory exists and is writable.",
            ) from e
        logger.debug(
            "Wrote JAVA_OPTS fragment %s (priority %d)",
            fragment.filename,
            fragment.priority,
        )

    def get(self, priority: int, name: str) -> Fragment | None:
        lookup = Fragment(priority, name)
        path = self.path_for(lookup)
        if not path.is_file():
            return None
        return Fragment(lookup.priority, lookup.name, self._read(path))

    def all_ordered(self) -> list[Fragment]:
        """Read every fragment file; a missing directory yields no fragments."""
        if not self._root.is_dir():
            return []
        try:
            entries = sorted(self._root.iterdir())
        except OSError as e:
            raise FragmentStoreError(
                f"Failed to list fragment store {self._root}: {e}", path=self._root
            ) from e

        fragments: list[Fragment] = []
        for entry in entries:
            parsed = parse_filename(entry.name)
            if parsed is None or not entry.is_file():
                logger.debug("Ignoring non-fragment entry %s", entry.name)
                continue
            priority, name = parsed
            fragments.append(Fragment(priority, name, self._read(entry)))
        return sorted(fragments)

    def _read(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise FragmentStoreError(
                f"Failed to read {path.name}: {e}", path=path
            ) from e


class MemoryFragmentStore:
    """Dict-backed store with the same contract; handy for dry runs and tests."""

    def __init__(self, fragments: Iterable[Fragment] = ()) -> None:
        self._fragments: dict[tuple[int, str], Fragment] = {}
        self._lock = threading.Lock()
        for fragment in fragments:
            self.put(fragment)

    def put(self, fragment: Fragment) -> None:
        with self._lock:
            self._fragments[(fragment.priority, fragment.name)] = fragment

    def get(self, priority: int, name: str) -> Fragment | None:
        lookup = Fragment(priority, name)
        with self._lock:
            return self._fragments.get((lookup.priority, lookup.name))

    def all_ordered(self) -> list[Fragment]:
        with self._lock:
            return sorted(self._fragments.values())


def write_fragment(
    store: FragmentStore, priority: int, name: str, content: str
) -> Fragment:
    """Producer entry point: build a fragment and store it.

    Args:
        store: Destination store.
        priority: ``0..99``; see `javaopts.fragment.Priority`.
        name: Contributor slug (sanitized).
        content: Option text, may reference ``$DEPS_DIR``, ``$HOME``,
            ``$JAVA_OPTS`` or any other environment variable.

    Returns:
        The stored Fragment.

    Raises:
        FragmentError: If priority or name is invalid.
        FragmentStoreError: If persistence fails.
    """
    fragment = Fragment(priority, name, content)
    store.put(fragment)
    return fragment
