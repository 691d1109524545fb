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
"""In-memory collaborators for deterministic tests and dry runs.

The fake checker rejects content containing any of its ``bad_tokens`` and
the fake formatter trims trailing whitespace and guarantees a final
newline. Both record their calls.
"""

from __future__ import annotations

import threading

from codescalpel.core.editing.errors import EditCancelledError
from codescalpel.tools.base import FormatError, Formatter, SyntaxChecker


def _check_cancel(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise EditCancelledError("Cancelled")


class FakeSyntaxChecker(SyntaxChecker):
    name = "fake"

    def __init__(self, bad_tokens: tuple[str, ...] = ("((((",)):
        self.bad_tokens = bad_tokens
        self.calls: list[tuple[str, str]] = []

    def check(self, path: str, content: str, cancel: threading.Event | None = None) -> list[str]:
        _check_cancel(cancel)
        self.calls.append((path, content))
        diagnostics = []
        for lineno, line in enumerate(content.split("\n"), start=1):
            for token in self.bad_tokens:
                col = line.find(token)
                if col != -1:
                    diagnostics.append(f"{path}:{lineno}:{col + 1}: unexpected {token!r}")
        return diagnostics


class FakeFormatter(Formatter):
    name = "fake"

    def __init__(self, fail_tokens: tuple[str, ...] = ()):
        self.fail_tokens = fail_tokens
        self.calls: list[tuple[str, str]] = []

    def format(self, path: str, content: str, cancel: threading.Event | None = None) -> str:
        _check_cancel(cancel)
        self.calls.append((path, content))
        for token in self.fail_tokens:
            if token in content:
                raise FormatError(f"cannot format content containing {token!r}")
        lines = [line.rstrip() for line in content.split("\n")]
        return "\n".join(lines).rstrip("\n") + "\n"
