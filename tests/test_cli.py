"""Command line interface: each subcommand end to end against a temp store."""

from __future__ import annotations

import io
import json
import os
from pathlib import Path

import pytest

from javaopts.cli import main

pytestmark = pytest.mark.unit


@pytest.fixture
def store_arg(store_dir: Path) -> list[str]:
    return ["--store", str(store_dir)]


def test_write_then_list(store_arg, store_dir, capsys) -> None:
    assert main(["write", *store_arg, "99", "user", "--", "-Ddebug=true"]) == 0
    assert main(["write", *store_arg, "5", "base", "--", "-Xms256m"]) == 0
    assert capsys.readouterr().out == "99_user.opts\n05_base.opts\n"

    assert main(["list", *store_arg]) == 0
    assert capsys.readouterr().out == "05_base\t-Xms256m\n99_user\t-Ddebug=true\n"
    assert (store_dir / "05_base.opts").is_file()


def test_write_reads_stdin(store_arg, store_dir, monkeypatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("-Dfrom=stdin\n"))
    assert main(["write", *store_arg, "35", "agent", "-"]) == 0
    assert (store_dir / "35_agent.opts").read_text() == "-Dfrom=stdin\n"


def test_write_invalid_priority_reports_error(store_arg, capsys) -> None:
    assert main(["write", *store_arg, "120", "x", "--", "-Da=1"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("error: Fragment priority 120 outside 0..99")
    assert "hint: Use Priority.USER" in err


def test_assemble_prints_value(store_arg, monkeypatch, capsys) -> None:
    main(["write", *store_arg, "5", "base", "--", "-Xms256m"])
    main(["write", *store_arg, "99", "user", "--", "-Dport=$PORT $JAVA_OPTS"])
    capsys.readouterr()
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("JAVA_OPTS", "-Xss1m")

    assert main(["assemble", *store_arg]) == 0
    assert capsys.readouterr().out == "-Xms256m -Dport=8080 -Xss1m\n"


def test_assemble_explain_writes_trace_to_stderr(store_arg, capsys) -> None:
    main(["write", *store_arg, "5", "base", "--", "-Da=$UNSET_FOR_TEST"])
    main(["write", *store_arg, "6", "blank", " "])
    capsys.readouterr()

    assert main(["assemble", *store_arg, "--explain"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "-Da=\n"
    assert "included: 05_base" in captured.err
    assert "skipped: 06_blank" in captured.err
    assert "unresolved: UNSET_FOR_TEST" in captured.err


def test_assemble_strict_fails(store_arg, monkeypatch, capsys) -> None:
    main(["write", *store_arg, "5", "base", "--", "-Da=$UNSET_FOR_TEST"])
    capsys.readouterr()

    assert main(["assemble", *store_arg, "--strict"]) == 1
    err = capsys.readouterr().err
    assert "error: Unresolved variables in JAVA_OPTS: UNSET_FOR_TEST" in err

    monkeypatch.setenv("JAVAOPTS_STRICT", "true")
    assert main(["assemble", *store_arg]) == 1
    assert main(["assemble", *store_arg, "--no-strict"]) == 0


def test_assemble_without_store_location(capsys) -> None:
    assert main(["assemble"]) == 1
    captured = capsys.readouterr()
    assert "error: No deps directory configured" in captured.err
    assert "hint: Export DEPS_DIR" in captured.err


def test_assemble_uses_deps_dir(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.setenv("DEPS_DIR", str(tmp_path))
    assert main(["write", "1", "x", "--", "-Dx=1"]) == 0
    assert (tmp_path / "0" / "java_opts" / "01_x.opts").is_file()

    assert main(["assemble"]) == 0
    assert capsys.readouterr().out.splitlines()[-1] == "-Dx=1"


def test_stage_and_profile_script(store_arg, tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.setenv(
        "JBP_CONFIG_JAVA_OPTS", "{java_opts: '-Dgreeting=\"hi there\"'}"
    )
    profile_dir = tmp_path / "profile.d"

    assert main(["stage", *store_arg, "--profile-dir", str(profile_dir)]) == 0
    assert capsys.readouterr().out == "05_jre.opts\n99_user_java_opts.opts\n"
    assert (profile_dir / "00_java_opts.sh").is_file()

    main(["list", *store_arg])
    listed = capsys.readouterr().out.splitlines()
    assert listed[-1] == "99_user_java_opts\t-Dgreeting=hi\\ there $JAVA_OPTS"


def test_profile_script_command(tmp_path, capsys) -> None:
    assert main(["profile-script", str(tmp_path)]) == 0
    assert capsys.readouterr().out == f"{tmp_path / '00_java_opts.sh'}\n"


def test_split_and_escape(capsys) -> None:
    assert main(["split", "--", "-Da='x y' -Db"]) == 0
    assert capsys.readouterr().out == "-Da=x y\n-Db\n"

    assert main(["escape", "--", "-Da=x y", "-Db"]) == 0
    assert capsys.readouterr().out == "-Da=x\\ y -Db\n"


def test_split_unterminated_quote(capsys) -> None:
    assert main(["split", "--", "-Da='open"]) == 1
    assert "Unterminated single quote" in capsys.readouterr().err


def test_config_show_and_audit(monkeypatch, capsys) -> None:
    monkeypatch.setenv("JAVAOPTS_STORE_DIRNAME", "opts")

    assert main(["config", "show"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["store_dirname"] == "opts"
    assert data["deps_index"] == "0"

    assert main(["config", "audit"]) == 0
    out = capsys.readouterr().out
    assert "store_dirname: env:JAVAOPTS_STORE_DIRNAME" in out
    assert "strict: default" in out


@pytest.mark.allow_dotenv
def test_assemble_ignores_dotenv_launch_variables(
    store_arg, tmp_path, monkeypatch, capsys
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text(
        "JAVA_OPTS=-Dfrom=dotenv\nLEAK=yes\nJAVAOPTS_STRICT=false\n",
        encoding="utf-8",
    )
    main(["write", *store_arg, "99", "user", "--", "-Dleak=$LEAK $JAVA_OPTS"])
    capsys.readouterr()

    assert main(["assemble", *store_arg]) == 0
    assert capsys.readouterr().out == "-Dleak=\n"
    assert "JAVA_OPTS" not in os.environ
    assert "LEAK" not in os.environ
