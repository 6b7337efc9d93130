"""Pytest configuration and fixtures.

Provides environment isolation and shared store/context fixtures. All
isolation fixtures here are autouse.
"""

from __future__ import annotations

from contextlib import suppress
import logging
import os

import pytest

from javaopts.resolver import RuntimeContext
from javaopts.store import DirectoryFragmentStore, MemoryFragmentStore

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================

_ISOLATED_PREFIXES = ("JAVAOPTS_", "JBP_CONFIG_", "BPL_")
_ISOLATED_NAMES = ("JAVA_OPTS", "DEPS_DIR")


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.find_dotenv", lambda *_args, **_kwargs: "", raising=False
        )


@pytest.fixture(autouse=True)
def isolate_java_opts_env(monkeypatch, tmp_path):
    """Clear variables that steer staging or assembly.

    Also points the project config file at a non-existent path so a stray
    ``javaopts.toml`` in the working directory cannot leak into tests.
    """
    for key in list(os.environ.keys()):
        if key.startswith(_ISOLATED_PREFIXES) or key in _ISOLATED_NAMES:
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("JAVAOPTS_CONFIG_PATH", str(tmp_path / "absent.toml"))


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def verbose_javaopts_logging():
    """Let caplog see debug records from the library."""
    logging.getLogger("javaopts").setLevel(logging.DEBUG)


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def store_dir(tmp_path):
    return tmp_path / "deps" / "0" / "java_opts"


@pytest.fixture
def dir_store(store_dir) -> DirectoryFragmentStore:
    return DirectoryFragmentStore(store_dir)


@pytest.fixture
def memory_store() -> MemoryFragmentStore:
    return MemoryFragmentStore()


@pytest.fixture
def runtime_context() -> RuntimeContext:
    """Typical launch-time context without an inbound JAVA_OPTS."""
    return RuntimeContext(
        deps_dir="/home/vcap/deps",
        home="/home/vcap/app",
        environ={"TMPDIR": "/tmp", "PORT": "8080"},
    )
