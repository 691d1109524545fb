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
CodeScalpel -- Edit Validator

Runs candidate content through the toolchain registered for the file's
extension before anything is written.

CHECKS:
    1. FORMAT       -- canonicalize whitespace and imports; on failure, ask
                       the checker whether the cause is a syntax error
    2. SYNTAX CHECK -- independent confirmation on the formatted result
    3. SKIP         -- extensions with no toolchain are always valid

The validator only sequences collaborators and interprets their failures;
it never parses source itself.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from codescalpel.core.editing.errors import FormatterError, SourceSyntaxError
from codescalpel.core.editing.models import ValidationOutcome
from codescalpel.tools.base import FormatError, Toolchain

logger = logging.getLogger("codescalpel.core.editing.validator")


class Validator:
    """
    Validates candidate content per extension.

    Usage:
        validator = Validator({".py": Toolchain(RuffFormatter(), PythonSyntaxChecker())})
        outcome = validator.validate("app.py", content)
        if outcome.ok:
            write(outcome.content)
    """

    def __init__(self, toolchains: dict[str, Toolchain] | None = None):
        self.toolchains = {ext.lower(): tc for ext, tc in (toolchains or {}).items()}

    def toolchain_for(self, path: str) -> Toolchain | None:
        return self.toolchains.get(Path(path).suffix.lower())

    def is_source(self, path: str) -> bool:
        return self.toolchain_for(path) is not None

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def format(self, path: str, content: str, cancel: threading.Event | None = None) -> str:
        """Format ``content``.

        Raises:
            SourceSyntaxError: the formatter failed because the content
                does not parse.
            FormatterError: the formatter failed on parseable content.
        """
        toolchain = self.toolchain_for(path)
        if toolchain is None:
            return content

        try:
            return toolchain.formatter.format(path, content, cancel=cancel)
        except FormatError as e:
            diagnostics = toolchain.checker.check(path, content, cancel=cancel)
            if diagnostics:
                raise SourceSyntaxError(
                    "Syntax Error (pre-commit):\n" + "\n".join(diagnostics),
                    diagnostics,
                ) from e
            raise FormatterError(f"{toolchain.formatter.name} failed: {e.output}") from e

    def validate(
        self,
        path: str,
        content: str,
        cancel: threading.Event | None = None,
    ) -> ValidationOutcome:
        """Format then syntax-check ``content``.

        Cancellation and environment failures propagate as exceptions;
        content problems are reported in the outcome.
        """
        toolchain = self.toolchain_for(path)
        if toolchain is None:
            logger.debug("No toolchain for %s, skipping validation", path)
            return ValidationOutcome(ok=True, content=content, skipped=True)

        try:
            formatted = self.format(path, content, cancel=cancel)
        except SourceSyntaxError as e:
            return ValidationOutcome(
                ok=False,
                diagnostics=e.diagnostics,
                content=content,
                kind=e.kind,
                stage="pre-commit",
            )
        except FormatterError as e:
            return ValidationOutcome(
                ok=False,
                diagnostics=[e.message],
                content=content,
                kind=e.kind,
                stage="pre-commit",
            )

        diagnostics = toolchain.checker.check(path, formatted, cancel=cancel)
        if diagnostics:
            logger.info("Post-format syntax check failed for %s: %d issue(s)", path, len(diagnostics))
            return ValidationOutcome(
                ok=False,
                diagnostics=diagnostics,
                content=formatted,
                kind=SourceSyntaxError.kind,
                stage="post-format",
            )

        return ValidationOutcome(ok=True, content=formatted)
