"""Launch-time assembly of JAVA_OPTS from the ordered fragment store.

Overview
--------
``resolve`` is a pure function of the store contents and a
`RuntimeContext`. It runs a fixed sequence of small transforms:

1. capture the inbound ``JAVA_OPTS`` value before anything else
2. ``t_concatenate``: join non-blank fragments in store order
3. ``t_structural``: literal ``$DEPS_DIR`` then ``$HOME``
4. ``t_pass_through``: ``$JAVA_OPTS`` from the value captured in step 1
5. ``t_environment``: every other ``$NAME`` / ``${NAME}`` in one pass
6. strip the result

Sharp edge: no re-scanning
--------------------------
The working text is a list of segments tagged resolved/unresolved. Each
transform only looks at unresolved segments, and whatever it inserts is
tagged resolved. A value that itself contains ``$VAR`` (including the
inbound ``JAVA_OPTS``) therefore comes through verbatim and can never grow
by referencing the output being built.

Missing variables expand to the empty string, as the legacy profile.d
script did. ``strict=True`` turns them into `UnresolvedVariableError`.
A ``$`` preceded by a backslash is not a reference, and ``$(...)`` is never
executed.

Parameter expansion
-------------------
Step 5 also understands ``${NAME:-default}``: the default is used when
``NAME`` is unset or empty, and is inserted as-is (it is not expanded
further). The legacy ``eval`` supported every shell expansion form; the
others (``${NAME:=x}``, ``${#NAME}``, ``${NAME%x}`` ...) are deliberately
not interpreted and pass through verbatim for the launch shell.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
import re
from typing import TYPE_CHECKING, Literal, overload

from javaopts.errors import UnresolvedVariableError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from javaopts.fragment import Fragment
    from javaopts.store import FragmentStore

logger = logging.getLogger(__name__)

PASS_THROUGH_VAR = "JAVA_OPTS"
DEPS_DIR_VAR = "DEPS_DIR"
HOME_VAR = "HOME"

_ENV_REFERENCE = re.compile(
    r"(?<!\\)\$(?:"
    r"\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<default>[^}]*))?\}"
    r"|(?P<bare>[A-Za-z_][A-Za-z0-9_]*))"
)


@dataclass(frozen=True)
class RuntimeContext:
    """Process-start inputs consumed by the resolver.

    ``deps_dir`` and ``home`` may be None when the launcher did not provide
    them; references then expand to the empty string (or fail in strict
    mode). ``inbound_java_opts`` is the pre-existing value of the
    pass-through variable; None means it was not set.
    """

    deps_dir: str | None = None
    home: str | None = None
    environ: Mapping[str, str] = field(default_factory=dict)
    inbound_java_opts: str | None = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> RuntimeContext:
        """Build a context from an environment mapping (default ``os.environ``)."""
        env = dict(os.environ if environ is None else environ)
        return cls(
            deps_dir=env.get(DEPS_DIR_VAR),
            home=env.get(HOME_VAR),
            environ=env,
            inbound_java_opts=env.get(PASS_THROUGH_VAR),
        )


@dataclass(frozen=True)
class AssemblyTrace:
    """What an assembly pass did, for ``--explain`` style diagnostics."""

    included: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    unresolved: tuple[str, ...] = ()


# (text, resolved) pairs; resolved text is never scanned again
_Segments = list[tuple[str, bool]]


@overload
def resolve(
    store: FragmentStore,
    context: RuntimeContext,
    *,
    strict: bool = ...,
    explain: Literal[False] = ...,
) -> str: ...


@overload
def resolve(
    store: FragmentStore,
    context: RuntimeContext,
    *,
    strict: bool = ...,
    explain: Literal[True],
) -> tuple[str, AssemblyTrace]: ...


def resolve(
    store: FragmentStore,
    context: RuntimeContext,
    *,
    strict: bool = False,
    explain: bool = False,
) -> str | tuple[str, AssemblyTrace]:
    """Assemble the final JAVA_OPTS value from every stored fragment.

    Args:
        store: Fragment store populated during staging. Read only.
        context: Runtime paths, environment and the inbound JAVA_OPTS.
        strict: Raise instead of expanding missing variables to "".
        explain: If True, also return an `AssemblyTrace`.

    Returns:
        The assembled option string, or ``(value, trace)`` if explain=True.

    Raises:
        UnresolvedVariableError: In strict mode, if any reference is missing.
        FragmentStoreError: If the store cannot be read.
    """
    inbound = context.inbound_java_opts or ""

    fragments = store.all_ordered()
    text, included, skipped = t_concatenate(fragments)

    unresolved: list[str] = []
    segments: _Segments = [(text, False)]
    segments = t_structural(segments, context, unresolved)
    segments = t_pass_through(segments, inbound)
    segments = t_environment(segments, context.environ, unresolved)

    if strict and unresolved:
        raise UnresolvedVariableError(unresolved)

    result = "".join(part for part, _ in segments).strip()
    logger.debug(
        "Assembled JAVA_OPTS from %d fragment(s) (%d blank, %d unresolved)",
        len(included),
        len(skipped),
        len(set(unresolved)),
    )
    if explain:
        trace = AssemblyTrace(
            included=tuple(included),
            skipped=tuple(skipped),
            unresolved=tuple(sorted(set(unresolved))),
        )
        return result, trace
    return result


# --- Transforms ---


def t_concatenate(fragments: list[Fragment]) -> tuple[str, list[str], list[str]]:
    """Join stripped fragment contents with single spaces, skipping blanks."""
    parts: list[str] = []
    included: list[str] = []
    skipped: list[str] = []
    for fragment in fragments:
        content = fragment.content.strip()
        if not content:
            skipped.append(fragment.key)
            continue
        parts.append(content)
        included.append(fragment.key)
    return " ".join(parts), included, skipped


def t_structural(
    segments: _Segments, context: RuntimeContext, unresolved: list[str]
) -> _Segments:
    """Substitute ``$DEPS_DIR`` then ``$HOME`` by literal text match."""
    for name, value in ((DEPS_DIR_VAR, context.deps_dir), (HOME_VAR, context.home)):

        def lookup(_: re.Match[str], name: str = name, value: str | None = value) -> str:
            if value is None:
                unresolved.append(name)
                return ""
            return value

        segments = _substitute(segments, _literal_reference(name), lookup)
    return segments


def t_pass_through(segments: _Segments, inbound: str) -> _Segments:
    """Substitute ``$JAVA_OPTS`` with the value captured before assembly."""
    return _substitute(segments, _literal_reference(PASS_THROUGH_VAR), lambda _: inbound)


def t_environment(
    segments: _Segments, environ: Mapping[str, str], unresolved: list[str]
) -> _Segments:
    """Expand all remaining variable references in a single pass."""

    def lookup(m: re.Match[str]) -> str:
        name = m.group("braced") or m.group("bare")
        value = environ.get(name)
        default = m.group("default")
        if default is not None and not value:
            return default
        if value is None:
            unresolved.append(name)
            return ""
        return value

    return _substitute(segments, _ENV_REFERENCE, lookup)


# --- Internal helpers ---


def _literal_reference(name: str) -> re.Pattern[str]:
    # Plain text match like the legacy sed: "$HOMEX" matches "$HOME"
    quoted = re.escape(name)
    return re.compile(rf"(?<!\\)\$(?:\{{{quoted}\}}|{quoted})")


def _substitute(
    segments: _Segments,
    pattern: re.Pattern[str],
    lookup: Callable[[re.Match[str]], str],
) -> _Segments:
    out: _Segments = []
    for text, resolved in segments:
        if resolved:
            out.append((text, True))
            continue
        pos = 0
        for m in pattern.finditer(text):
            if m.start() > pos:
                out.append((text[pos : m.start()], False))
            out.append((lookup(m), True))
            pos = m.end()
        if pos < len(text):
            out.append((text[pos:], False))
    return out
