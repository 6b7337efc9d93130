"""Exception hierarchy for javaopts."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


class JavaOptsError(Exception):
    """Base exception for all javaopts errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(JavaOptsError):
    """Configuration validation or resolution failed."""


class UnterminatedQuoteError(JavaOptsError):
    """A quoted region was still open at the end of the input.

    The original input is kept on ``source`` so the operator can locate the
    offending configuration value.
    """

    def __init__(self, source: str, quote: str) -> None:
        kind = "single" if quote == "'" else "double"
        super().__init__(
            f"Unterminated {kind} quote in: {source}",
            hint=f"Close the {quote} quote or escape it with a backslash.",
        )
        self.source = source
        self.quote = quote


class FragmentError(JavaOptsError):
    """A fragment was constructed with an invalid priority or name."""


class FragmentStoreError(JavaOptsError):
    """Reading or writing the fragment store failed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.path = path


class UnresolvedVariableError(JavaOptsError):
    """Strict assembly found variable references with no value."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(sorted(set(names)))
        super().__init__(
            "Unresolved variables in JAVA_OPTS: " + ", ".join(self.names),
            hint="Export the variables at launch or disable strict mode.",
        )
