"""Command line entry point (``javaopts``)."""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
import sys
from typing import TYPE_CHECKING

from javaopts.config import audit_text, resolve_config, to_dict
from javaopts.errors import JavaOptsError
from javaopts.frameworks import stage
from javaopts.launcher import write_profile_script
from javaopts.resolver import RuntimeContext, resolve
from javaopts.shellwords import escape_options, tokenize
from javaopts.store import DirectoryFragmentStore, write_fragment

if TYPE_CHECKING:
    from collections.abc import Sequence

    from javaopts.config import FrozenConfig


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        "javaopts", description="Stage and assemble JAVA_OPTS fragments."
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    def add_store(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--store",
            type=Path,
            default=None,
            help="fragment directory (default: $DEPS_DIR/<index>/java_opts)",
        )

    p = sub.add_parser("write", help="write one fragment")
    add_store(p)
    p.add_argument("priority", type=int)
    p.add_argument("name")
    p.add_argument("content", help="option text, or '-' to read stdin")

    p = sub.add_parser("assemble", help="print the assembled JAVA_OPTS")
    add_store(p)
    p.add_argument(
        "--strict",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="fail on unresolved variables",
    )
    p.add_argument(
        "--explain", action="store_true", help="report fragments on stderr"
    )

    p = sub.add_parser("list", help="list fragments in priority order")
    add_store(p)

    p = sub.add_parser("stage", help="run the built-in producers")
    add_store(p)
    p.add_argument("--app-dir", type=Path, default=None)
    p.add_argument(
        "--profile-dir", type=Path, default=None, help="also write the profile.d shim"
    )

    p = sub.add_parser("profile-script", help="write the profile.d shim")
    p.add_argument("profile_dir", type=Path)

    p = sub.add_parser("split", help="tokenize a shell-quoted string")
    p.add_argument("text")

    p = sub.add_parser("escape", help="escape options as the user fragment does")
    p.add_argument("options", nargs="+")

    p = sub.add_parser("config", help="show resolved configuration")
    p.add_argument("action", choices=("show", "audit"))

    return parser


def _store(args: argparse.Namespace, cfg: FrozenConfig) -> DirectoryFragmentStore:
    return DirectoryFragmentStore(args.store or cfg.store_dir())


def _run(args: argparse.Namespace, cfg: FrozenConfig) -> int:
    out = sys.stdout
    match args.cmd:
        case "write":
            content = sys.stdin.read() if args.content == "-" else args.content
            fragment = write_fragment(
                _store(args, cfg), args.priority, args.name, content
            )
            out.write(fragment.filename + "\n")
        case "assemble":
            strict = cfg.strict if args.strict is None else args.strict
            value, trace = resolve(
                _store(args, cfg),
                RuntimeContext.from_environ(os.environ),
                strict=strict,
                explain=True,
            )
            out.write(value + "\n")
            if args.explain:
                sys.stderr.write(f"included: {', '.join(trace.included) or '-'}\n")
                sys.stderr.write(f"skipped: {', '.join(trace.skipped) or '-'}\n")
                sys.stderr.write(f"unresolved: {', '.join(trace.unresolved) or '-'}\n")
        case "list":
            for fragment in _store(args, cfg).all_ordered():
                out.write(f"{fragment.key}\t{fragment.content}\n")
        case "stage":
            fragments = stage(_store(args, cfg), os.environ, args.app_dir)
            for fragment in fragments:
                out.write(fragment.filename + "\n")
            if args.profile_dir is not None:
                write_profile_script(args.profile_dir, cfg)
        case "profile-script":
            out.write(str(write_profile_script(args.profile_dir, cfg)) + "\n")
        case "split":
            for token in tokenize(args.text):
                out.write(token + "\n")
        case "escape":
            out.write(escape_options(args.options) + "\n")
        case "config":
            if args.action == "show":
                out.write(json.dumps(to_dict(cfg), indent=2) + "\n")
            else:
                _, sources = resolve_config(explain=True)
                out.write(audit_text(cfg, sources) + "\n")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, run one command and return the exit status."""
    args = _build_parser().parse_args(argv)
    try:
        cfg = resolve_config()
        logging.basicConfig(
            level=cfg.log_level, format="%(levelname)s %(name)s: %(message)s"
        )
        return _run(args, cfg)
    except JavaOptsError as e:
        sys.stderr.write(f"error: {e}\n")
        if e.hint:
            sys.stderr.write(f"hint: {e.hint}\n")
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
