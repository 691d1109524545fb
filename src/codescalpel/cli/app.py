# CodeScalpel
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
#
# This file is part of CodeScalpel.
#
# CodeScalpel is dual-licensed:
#
# 1. Open Source: GNU Affero General Public License v3.0 (AGPL-3.0)
# 2. Commercial: Available from Phoenix Link (Pty) Ltd
#
# Contributions require a signed CLA. See COPYRIGHT.md and CLA.md.
"""
CodeScalpel CLI -- Main entry point.

Usage:
    codescalpel edit FILE --search "func old() {}" --content "func new() {}"
    codescalpel edit FILE --strategy overwrite_file --content-file new.go
    codescalpel serve --port 8000
    codescalpel config [--init]
    codescalpel --version
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from codescalpel import __version__
from codescalpel.core.config import DEFAULT_CONFIG_PATH, EngineConfig, load_config, save_config
from codescalpel.core.editing.engine import EditEngine
from codescalpel.core.editing.models import EditStrategy

logger = logging.getLogger("codescalpel.cli.app")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codescalpel",
        description="CodeScalpel -- fuzzy-matching, validating single-file editor",
    )
    parser.add_argument("--version", action="store_true", help="Print the version and exit")
    parser.add_argument("--config", default=None, help=f"Config file (default: {DEFAULT_CONFIG_PATH})")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command")

    edit = sub.add_parser("edit", help="Edit one file")
    edit.add_argument("file_path")
    edit.add_argument(
        "--strategy",
        default=None,
        choices=[s.value for s in EditStrategy],
        help="Edit strategy (default from config: single_match)",
    )
    search = edit.add_mutually_exclusive_group()
    search.add_argument("--search", default=None, help="Search context text")
    search.add_argument("--search-file", default=None, help="Read search context from a file")
    content = edit.add_mutually_exclusive_group(required=True)
    content.add_argument("--content", default=None, help="Replacement text")
    content.add_argument("--content-file", default=None, help="Read replacement from a file ('-' for stdin)")
    edit.add_argument("--threshold", type=float, default=None, help="Fuzzy threshold 0..1")
    edit.add_argument("--timeout", type=float, default=None, help="Per-tool timeout in seconds")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    cfg = sub.add_parser("config", help="Show the effective configuration")
    cfg.add_argument("--init", action="store_true", help="Write the defaults to the config file")
    return parser


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _cmd_edit(args: argparse.Namespace, config: EngineConfig) -> int:
    if args.timeout is not None:
        config.tool_timeout_seconds = args.timeout

    try:
        search = _read_text(args.search_file) if args.search_file else args.search
        new_content = _read_text(args.content_file) if args.content_file else args.content
    except OSError as e:
        print(f"IOError: {e}", file=sys.stderr)
        return 1

    data = {
        "file_path": args.file_path,
        "strategy": args.strategy,
        "search_context": search,
        "new_content": new_content,
        "threshold": args.threshold,
    }

    live_log = None
    try:
        from codescalpel.core.logging import get_logger

        live_log = get_logger()
    except OSError as e:
        logger.warning("Live log unavailable: %s", e)

    engine = EditEngine(config=config, live_log=live_log)
    response = engine.handle(data)
    stream = sys.stderr if response["is_error"] else sys.stdout
    print(response["message"], file=stream)
    return 1 if response["is_error"] else 0


def _cmd_config(args: argparse.Namespace, config: EngineConfig) -> int:
    if args.init:
        path = Path(args.config) if args.config else DEFAULT_CONFIG_PATH
        if path.exists():
            print(f"Config already exists: {path}", file=sys.stderr)
            return 1
        save_config(EngineConfig(), path)
        print(f"Wrote default config to {path}")
        return 0
    print(yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False), end="")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"codescalpel {__version__}")
        return 0

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    config = load_config(args.config)

    if args.command == "edit":
        return _cmd_edit(args, config)
    if args.command == "config":
        return _cmd_config(args, config)
    if args.command == "serve":
        from codescalpel.api.server import run

        run(host=args.host, port=args.port)
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
