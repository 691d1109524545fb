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
CodeScalpel -- Edit Engine

Runs one edit request through the pipeline:

    read -> match -> resolve -> transform -> validate -> commit

Every stage may stop the run with a typed EditError; the engine converts it
into a failure EditResult whose message tells the caller how to retry
(exact diagnostics, ambiguous line numbers, best-candidate diff).

Nothing is written unless validation passed, so a failed edit leaves an
existing file byte-identical. Concurrent edits of the same path are not
coordinated: the last writer wins.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any

from codescalpel.core.config import EngineConfig, build_validator
from codescalpel.core.editing.committer import commit, read_document
from codescalpel.core.editing.errors import (
    EditCancelledError,
    EditError,
    FormatterError,
    InvalidRequestError,
    SourceSyntaxError,
)
from codescalpel.core.editing.matcher import find_candidates
from codescalpel.core.editing.models import (
    EditRequest,
    EditResult,
    EditStage,
    EditStrategy,
    StageTracker,
    ValidationOutcome,
)
from codescalpel.core.editing.resolver import resolve
from codescalpel.core.editing.strategies import apply_strategy
from codescalpel.core.editing.validator import Validator

if TYPE_CHECKING:
    from codescalpel.core.logging import ScalpelLogger

logger = logging.getLogger("codescalpel.core.editing.engine")


class EditEngine:
    """
    Applies edit requests to files.

    Usage:
        engine = EditEngine()
        result = engine.edit(EditRequest(
            file_path="main.go",
            search_context="func old() {}",
            new_content="func new() {}",
        ))
        print(result.message)

        # Wire shape in, wire shape out
        response = engine.handle({"file_path": "main.go", "strategy": "overwrite_file",
                                  "new_content": "package main\\n"})
    """

    def __init__(
        self,
        validator: Validator | None = None,
        config: EngineConfig | None = None,
        live_log: ScalpelLogger | None = None,
    ):
        self.config = config or EngineConfig()
        self.validator = validator if validator is not None else build_validator(self.config)
        self.live_log = live_log

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def handle(self, data: dict[str, Any], cancel: threading.Event | None = None) -> dict[str, Any]:
        """Run a request given in the tool's wire shape and return the response."""
        try:
            request = EditRequest.from_dict(
                data,
                default_threshold=self.config.default_threshold,
                default_strategy=self.config.default_strategy,
            )
        except (TypeError, ValueError) as e:
            return self._fail(InvalidRequestError(str(e)), data.get("file_path", ""), StageTracker())
        return self.edit(request, cancel=cancel).to_response()

    def edit(self, request: EditRequest, cancel: threading.Event | None = None) -> EditResult:
        """Apply ``request``. Never raises for bad input; see EditResult.kind."""
        tracker = StageTracker()
        try:
            return self._run(request, tracker, cancel)
        except EditError as e:
            return self._fail(e, request.file_path, tracker)

    # =========================================================================
    # PIPELINE
    # =========================================================================

    def _run(
        self,
        request: EditRequest,
        tracker: StageTracker,
        cancel: threading.Event | None,
    ) -> EditResult:
        strategy = request.strategy
        self._check_request(request)

        document = read_document(request.file_path, strategy)

        if strategy is EditStrategy.OVERWRITE_FILE:
            new_content = apply_strategy(document.content, [], request.new_content, strategy)
            replaced = 0
        else:
            report = find_candidates(
                document.content,
                request.search_context,
                request.threshold,
                # Every verbatim occurrence, so duplicates surface as ambiguity.
                find_all=True,
                cancel=cancel,
            )
            tracker.advance(EditStage.MATCHED)

            targets = resolve(
                report,
                strategy,
                request.search_context,
                document.content,
                request.threshold,
                context_lines=self.config.diff_context_lines,
            )
            tracker.advance(EditStage.RESOLVED)
            new_content = apply_strategy(document.content, targets, request.new_content, strategy)
            replaced = len(targets)
        tracker.advance(EditStage.TRANSFORMED)

        outcome = self.validator.validate(request.file_path, new_content, cancel=cancel)
        self._raise_for_outcome(request.file_path, outcome)
        tracker.advance(EditStage.VALIDATED)

        if cancel is not None and cancel.is_set():
            raise EditCancelledError("Cancelled before commit; file left unchanged")

        commit(request.file_path, outcome.content, create_parents=not document.existed)
        tracker.advance(EditStage.COMMITTED)

        verb = "updated" if document.existed else "created"
        message = f"Success: File {verb}. (Strategy: {strategy.value})"
        if strategy is EditStrategy.REPLACE_ALL:
            message += f" Replaced {replaced} occurrence(s)."
        if outcome.skipped:
            message += f" No validation for '{Path(request.file_path).suffix or 'extensionless'}' files."

        logger.info("%s %s (%s)", verb.capitalize(), request.file_path, strategy.value)
        if self.live_log:
            self.live_log.edit(
                "committed",
                file_path=request.file_path,
                strategy=strategy.value,
                replaced=replaced,
                created=not document.existed,
            )
        return EditResult.success(message, stage=tracker.stage)

    def _check_request(self, request: EditRequest) -> None:
        if not request.file_path:
            raise InvalidRequestError("file_path is required")
        if not 0.0 <= request.threshold <= 1.0:
            raise InvalidRequestError(f"threshold must be between 0 and 1, got {request.threshold}")
        if request.strategy.needs_search_context and not request.search_context:
            raise InvalidRequestError("search_context is required for replace strategies")

    def _raise_for_outcome(self, path: str, outcome: ValidationOutcome) -> None:
        if self.live_log and not outcome.skipped:
            self.live_log.validation(path, ok=outcome.ok, diagnostics=len(outcome.diagnostics))
        if outcome.ok:
            return
        if outcome.kind == FormatterError.kind:
            raise FormatterError(outcome.diagnostic_text)
        raise SourceSyntaxError(
            f"Syntax Error ({outcome.stage or 'pre-commit'}):\n{outcome.diagnostic_text}",
            outcome.diagnostics,
        )

    def _fail(self, error: EditError, file_path: str, tracker: StageTracker) -> EditResult:
        if not tracker.is_terminal:
            tracker.advance(EditStage.FAILED)
        logger.info("Edit failed for %s: %s", file_path, error.kind)
        if self.live_log:
            self.live_log.edit("failed", file_path=file_path, success=False, kind=error.kind)
        return EditResult.failure(error.kind, f"{error.kind}: {error.message}", stage=tracker.stage)
