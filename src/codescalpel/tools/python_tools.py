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
"""Python toolchain: compile-based syntax check and Ruff formatting.

Design:
  - ``PythonSyntaxChecker`` compiles in-process; no subprocess needed
  - ``RuffSyntaxChecker`` runs ``ruff check --output-format=json`` over stdin
    and keeps only syntax-level findings
  - ``RuffFormatter`` sorts imports (``ruff check --select I --fix``) and
    then runs ``ruff format``, both over stdin
  - Ruff is invoked as ``python -m ruff`` so the interpreter's own install
    is used even when its scripts directory is not on PATH
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from dataclasses import dataclass
from typing import Any

from codescalpel.tools.base import FormatError, Formatter, SyntaxChecker
from codescalpel.tools.process import DEFAULT_TIMEOUT, run_tool

logger = logging.getLogger("codescalpel.tools.python_tools")

# Ruff codes that mean "this does not parse".
SYNTAX_CODES = ("E999",)


# ---------------------------------------------------------------------------
# Ruff JSON diagnostics
# ---------------------------------------------------------------------------


@dataclass
class RuffIssue:
    """A single finding reported by Ruff."""

    code: str = ""
    message: str = ""
    filename: str = ""
    row: int = 0
    col: int = 0

    @classmethod
    def from_ruff_json(cls, item: dict[str, Any]) -> RuffIssue:
        location = item.get("location") or {}
        return cls(
            code=item.get("code") or "",
            message=item.get("message", ""),
            filename=item.get("filename", ""),
            row=location.get("row", 0),
            col=location.get("column", 0),
        )

    @property
    def is_syntax_error(self) -> bool:
        # Recent Ruff releases report parse failures without a rule code.
        return not self.code or self.code in SYNTAX_CODES

    def diagnostic(self, path: str) -> str:
        return f"{path}:{self.row}:{self.col}: {self.message}"


def parse_ruff_json(raw_json: str) -> list[RuffIssue]:
    """Parse Ruff's JSON output into a list of RuffIssue objects."""
    try:
        items = json.loads(raw_json)
        if not isinstance(items, list):
            return []
        return [RuffIssue.from_ruff_json(item) for item in items]
    except (json.JSONDecodeError, TypeError):
        return []


# ---------------------------------------------------------------------------
# Checkers
# ---------------------------------------------------------------------------


class PythonSyntaxChecker(SyntaxChecker):
    """Compile the content with the running interpreter."""

    name = "python"

    def check(self, path: str, content: str, cancel: threading.Event | None = None) -> list[str]:
        try:
            compile(content, path, "exec", dont_inherit=True)
        except SyntaxError as e:
            return [f"{path}:{e.lineno or 0}:{e.offset or 0}: {e.msg}"]
        except ValueError as e:
            return [f"{path}:0:0: {e}"]
        return []


class RuffSyntaxChecker(SyntaxChecker):
    """Syntax check through Ruff's parser.

    Ruff reports parse failures alongside its lint findings; only the parse
    failures are kept.
    """

    name = "ruff"

    def __init__(self, python: str | None = None, timeout: float = DEFAULT_TIMEOUT):
        self.python = python or sys.executable
        self.timeout = timeout

    def check(self, path: str, content: str, cancel: threading.Event | None = None) -> list[str]:
        cmd = [
            self.python,
            "-m",
            "ruff",
            "check",
            "--output-format=json",
            "--stdin-filename",
            path,
            "-",
        ]
        run = run_tool(cmd, content, timeout=self.timeout, cancel=cancel)
        issues = [i for i in parse_ruff_json(run.stdout) if i.is_syntax_error]
        if not issues and run.returncode not in (0, 1):
            return [f"{path}:0:0: ruff failed: {run.output}"]
        return [i.diagnostic(path) for i in issues]


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------


class RuffFormatter(Formatter):
    """Import ordering plus ``ruff format``."""

    name = "ruff"

    def __init__(
        self,
        python: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        fix_imports: bool = True,
    ):
        self.python = python or sys.executable
        self.timeout = timeout
        self.fix_imports = fix_imports

    def _ruff(self, *args: str) -> list[str]:
        return [self.python, "-m", "ruff", *args]

    def format(self, path: str, content: str, cancel: threading.Event | None = None) -> str:
        if self.fix_imports:
            run = run_tool(
                self._ruff("check", "--select", "I", "--fix", "--quiet", "--stdin-filename", path, "-"),
                content,
                timeout=self.timeout,
                cancel=cancel,
            )
            if not run.ok:
                raise FormatError(f"ruff import sort failed (exit {run.returncode})", run.output)
            content = run.stdout

        run = run_tool(
            self._ruff("format", "--quiet", "--stdin-filename", path, "-"),
            content,
            timeout=self.timeout,
            cancel=cancel,
        )
        if not run.ok:
            raise FormatError(f"ruff format failed (exit {run.returncode})", run.output)
        return run.stdout
