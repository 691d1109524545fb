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
"""Typed failures raised inside the edit pipeline.

Each stage raises one of these; ``EditEngine.edit`` recovers them into a
failure ``EditResult`` so callers never see an exception for bad input.
"""

from __future__ import annotations

from codescalpel.core.editing.models import Candidate


class EditError(Exception):
    """Base class for all edit pipeline failures."""

    kind = "EditError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidRequestError(EditError):
    kind = "InvalidRequest"


class NoMatchError(EditError):
    """No span met the threshold. Carries the best window for feedback."""

    kind = "NoMatch"

    def __init__(self, message: str, best: Candidate | None = None, diff: str = ""):
        super().__init__(message)
        self.best = best
        self.diff = diff


class AmbiguousMatchError(EditError):
    """More than one non-overlapping span matched a single-target edit."""

    kind = "AmbiguousMatch"

    def __init__(self, message: str, lines: list[int]):
        super().__init__(message)
        self.lines = lines


class SourceSyntaxError(EditError):
    """The syntax checker rejected the candidate content."""

    kind = "SyntaxError"

    def __init__(self, message: str, diagnostics: list[str] | None = None):
        super().__init__(message)
        self.diagnostics = diagnostics or []


class FormatterError(EditError):
    kind = "FormatterError"


class EditIOError(EditError):
    """Read/write failure or an unavailable collaborator binary."""

    kind = "IOError"


class EditCancelledError(EditError):
    """A collaborator subprocess was cancelled or timed out."""

    kind = "Cancelled"
