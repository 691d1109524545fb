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
"""Go toolchain: ``gofmt -e`` syntax check and ``goimports`` formatting.

Both tools read stdin and report errors as ``<standard input>:L:C: msg``;
the placeholder is rewritten to the real path so diagnostics point at the
file being edited.
"""

from __future__ import annotations

import logging
import os
import threading

from codescalpel.tools.base import FormatError, Formatter, SyntaxChecker
from codescalpel.tools.process import DEFAULT_TIMEOUT, run_tool

logger = logging.getLogger("codescalpel.tools.go_tools")

STDIN_NAME = "<standard input>"


def _diagnostics(path: str, output: str) -> list[str]:
    return [line.replace(STDIN_NAME, path) for line in output.splitlines() if line.strip()]


class GofmtSyntaxChecker(SyntaxChecker):
    name = "gofmt"

    def __init__(self, binary: str = "gofmt", timeout: float = DEFAULT_TIMEOUT):
        self.binary = binary
        self.timeout = timeout

    def check(self, path: str, content: str, cancel: threading.Event | None = None) -> list[str]:
        run = run_tool([self.binary, "-e"], content, timeout=self.timeout, cancel=cancel)
        if run.ok:
            return []
        return _diagnostics(path, run.stderr) or [f"{path}:0:0: {self.binary} exited {run.returncode}"]


class GoimportsFormatter(Formatter):
    """Fix imports and format with ``goimports`` (or plain ``gofmt``)."""

    name = "goimports"

    def __init__(self, binary: str = "goimports", timeout: float = DEFAULT_TIMEOUT):
        self.binary = binary
        self.timeout = timeout

    def format(self, path: str, content: str, cancel: threading.Event | None = None) -> str:
        cmd = [self.binary]
        srcdir = os.path.dirname(os.path.abspath(path))
        if os.path.basename(self.binary) == "goimports":
            # Resolve imports against the package the file lives in.
            cmd += ["-srcdir", srcdir]
        cwd = srcdir if os.path.isdir(srcdir) else None
        run = run_tool(cmd, content, timeout=self.timeout, cancel=cancel, cwd=cwd)
        if not run.ok:
            detail = "\n".join(_diagnostics(path, run.stderr)) or run.output
            raise FormatError(f"{self.binary} failed (exit {run.returncode})", detail)
        return run.stdout
