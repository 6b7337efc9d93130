"""javaopts: ordered JAVA_OPTS fragments for staged Java applications.

Public API:
    - write_fragment(): Producer entry point (one fragment per contributor)
    - assemble(): Launch-time consumer returning the final JAVA_OPTS
    - resolve(): Pure assembly over a store and a RuntimeContext
    - tokenize() / escape_option(): Shell-style splitting and escaping
"""

from __future__ import annotations

import logging

from javaopts.errors import (
    ConfigurationError,
    FragmentError,
    FragmentStoreError,
    JavaOptsError,
    UnresolvedVariableError,
    UnterminatedQuoteError,
)
from javaopts.fragment import Fragment, Priority
from javaopts.launcher import assemble, write_profile_script
from javaopts.resolver import AssemblyTrace, RuntimeContext, resolve
from javaopts.shellwords import escape_option, escape_options, escape_value, tokenize
from javaopts.store import (
    DirectoryFragmentStore,
    FragmentStore,
    MemoryFragmentStore,
    write_fragment,
)

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("javaopts")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("javaopts").addHandler(logging.NullHandler())

__all__ = [
    "AssemblyTrace",
    "ConfigurationError",
    "DirectoryFragmentStore",
    "Fragment",
    "FragmentError",
    "FragmentStore",
    "FragmentStoreError",
    "JavaOptsError",
    "MemoryFragmentStore",
    "Priority",
    "RuntimeContext",
    "UnresolvedVariableError",
    "UnterminatedQuoteError",
    "assemble",
    "escape_option",
    "escape_options",
    "escape_value",
    "resolve",
    "tokenize",
    "write_fragment",
    "write_profile_script",
]
