"""Stage fragments, then source the generated profile.d shim in bash."""

from __future__ import annotations

import os
from pathlib import Path
import shutil
import subprocess
import sys

import pytest

import javaopts
from javaopts.config import resolve_config
from javaopts.frameworks import stage
from javaopts.launcher import write_profile_script
from javaopts.store import DirectoryFragmentStore, write_fragment

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("bash") is None, reason="bash not available"),
]


@pytest.fixture
def launcher(tmp_path: Path) -> Path:
    """Executable that runs the CLI with the interpreter under test."""
    path = tmp_path / "bin" / "javaopts"
    path.parent.mkdir()
    path.write_text(f'#!/bin/sh\nexec "{sys.executable}" -m javaopts "$@"\n')
    path.chmod(0o755)
    return path


def _source_profile(script: Path, env: dict[str, str]) -> str:
    src_root = Path(javaopts.__file__).resolve().parents[1]
    env = {**env, "PYTHONPATH": str(src_root)}
    result = subprocess.run(
        ["bash", "-c", f'source "{script}"; printf "%s" "$JAVA_OPTS"'],
        env=env,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def test_profile_shim_exports_assembled_java_opts(tmp_path, launcher) -> None:
    deps = tmp_path / "deps"
    cfg = resolve_config({"launcher_command": str(launcher)})
    store = DirectoryFragmentStore(cfg.store_dir({"DEPS_DIR": str(deps)}))

    stage(
        store,
        {"JBP_CONFIG_JAVA_OPTS": "{java_opts: \"-Dgreeting='hello world'\"}"},
    )
    write_fragment(store, 35, "agent", "-javaagent:$DEPS_DIR/0/agent.jar")
    script = write_profile_script(tmp_path / "profile.d", cfg)

    env = {
        "PATH": os.environ.get("PATH", "/usr/bin:/bin"),
        "HOME": str(tmp_path / "app"),
        "DEPS_DIR": str(deps),
        "TMPDIR": "/tmp",
        "JAVA_OPTS": "-Xss1m",
        "JAVAOPTS_CONFIG_PATH": str(tmp_path / "absent.toml"),
    }

    assert _source_profile(script, env) == (
        f"-Djava.io.tmpdir=/tmp -javaagent:{deps}/0/agent.jar "
        "-Dgreeting=hello\\ world -Xss1m"
    )


def test_profile_shim_keeps_java_opts_when_assembly_fails(tmp_path, launcher) -> None:
    cfg = resolve_config({"launcher_command": str(launcher)})
    script = write_profile_script(tmp_path / "profile.d", cfg)

    env = {
        "PATH": os.environ.get("PATH", "/usr/bin:/bin"),
        "DEPS_DIR": str(tmp_path / "deps"),
        "JAVA_OPTS": "-Dkept=1",
        "JAVAOPTS_CONFIG_PATH": str(tmp_path / "absent.toml"),
        # Invalid configuration makes the assembler exit non-zero
        "JAVAOPTS_LOG_LEVEL": "LOUD",
    }
    assert _source_profile(script, env) == "-Dkept=1"
