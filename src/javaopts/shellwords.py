"""Shell-style splitting and escaping of JVM option strings.

Overview
--------
User configuration arrives as a single shell-quoted string (for example
``-Dgreeting='hello world' -Xmx512M``). ``tokenize`` splits it into literal
option tokens; ``escape_option`` then re-escapes the *value* half of each
``key=value`` token so that a later shell re-interpretation at launch time
reproduces the literal value.

The escaping rules reproduce the legacy Ruby buildpack character for
character, so configuration that is already deployed keeps its meaning:

- safe (never escaped): ``A-Z a-z 0-9 _ - . , : / @ \\ $`` and newline
- newline becomes ``'`` + newline + ``'``
- an empty value becomes ``''``
- everything else, ``=`` included, gets a single backslash prefix

``$`` stays unescaped because assembly expands ``$NAME`` references later.
"""

from __future__ import annotations

import string
from typing import TYPE_CHECKING

from javaopts.errors import UnterminatedQuoteError

if TYPE_CHECKING:
    from collections.abc import Iterable

_SAFE_CHARS = frozenset(string.ascii_letters + string.digits + "_-.,:/@\\$\n")

# str.isspace also accepts the ASCII separators \x1c-\x1f; they stay token text
_NON_SEPARATORS = frozenset("\x1c\x1d\x1e\x1f")


def tokenize(text: str) -> list[str]:
    """Split ``text`` into option tokens following shell quoting rules.

    Args:
        text: Raw configuration string, possibly quoted.

    Returns:
        Tokens with quotes and escapes resolved. Empty or whitespace-only
        input returns an empty list.

    Raises:
        UnterminatedQuoteError: If a single or double quote is never closed.
    """
    tokens: list[str] = []
    current: list[str] = []
    in_single = False
    in_double = False
    escaped = False

    for ch in text:
        if escaped:
            current.append(ch)
            escaped = False
            continue

        if in_single:
            if ch == "'":
                in_single = False
            else:
                current.append(ch)
            continue

        if ch == "\\":
            escaped = True
            continue

        if in_double:
            if ch == '"':
                in_double = False
            else:
                current.append(ch)
            continue

        if ch == "'":
            in_single = True
        elif ch == '"':
            in_double = True
        elif _is_separator(ch):
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(ch)

    if in_single or in_double:
        raise UnterminatedQuoteError(text, "'" if in_single else '"')

    if current:
        tokens.append("".join(current))
    return tokens


def _is_separator(ch: str) -> bool:
    return ch.isspace() and ch not in _NON_SEPARATORS


def escape_value(value: str) -> str:
    """Backslash-escape every character outside the safe set."""
    if not value:
        return "''"

    out: list[str] = []
    for ch in value:
        if ch == "\n":
            out.append("'\n'")
            continue
        if ch not in _SAFE_CHARS:
            out.append("\\")
        out.append(ch)
    return "".join(out)


def escape_option(option: str) -> str:
    """Escape the value part of a ``key=value`` option.

    Only the text after the first ``=`` is escaped. Bare flags, and options
    whose only ``=`` is the final character, come back unchanged.

    Example:
        >>> escape_option("-Dprop=a b(c)")
        '-Dprop=a\\\\ b\\\\(c\\\\)'
    """
    key, sep, value = option.partition("=")
    if not sep or not value:
        return option
    return f"{key}={escape_value(value)}"


def escape_options(options: Iterable[str]) -> str:
    """Escape each option and join them with single spaces."""
    return " ".join(escape_option(opt) for opt in options)
