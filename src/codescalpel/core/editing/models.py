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
"""Data model for a single edit invocation.

Everything here lives for the duration of one ``EditEngine.edit`` call:
the document is read once, candidates are produced by the matcher, and
the result is the only thing handed back to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_THRESHOLD = 0.85


class EditStrategy(str, Enum):
    """Closed set of ways a replacement may be applied to a document."""

    SINGLE_MATCH = "single_match"
    REPLACE_ALL = "replace_all"
    OVERWRITE_FILE = "overwrite_file"

    @property
    def needs_search_context(self) -> bool:
        return self is not EditStrategy.OVERWRITE_FILE

    @property
    def may_create(self) -> bool:
        return self is EditStrategy.OVERWRITE_FILE

    @classmethod
    def parse(cls, value: str | EditStrategy | None) -> EditStrategy:
        """Resolve a wire value, defaulting to single_match when empty."""
        if isinstance(value, EditStrategy):
            return value
        if not value:
            return cls.SINGLE_MATCH
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown strategy '{value}' (expected one of: {valid})") from None


class EditStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class EditStage(str, Enum):
    """Per-invocation pipeline states."""

    START = "start"
    MATCHED = "matched"
    RESOLVED = "resolved"
    TRANSFORMED = "transformed"
    VALIDATED = "validated"
    COMMITTED = "committed"
    FAILED = "failed"


# Valid state transitions. OverwriteFile skips matching and resolution.
VALID_TRANSITIONS: dict[EditStage, set[EditStage]] = {
    EditStage.START: {EditStage.MATCHED, EditStage.TRANSFORMED, EditStage.FAILED},
    EditStage.MATCHED: {EditStage.RESOLVED, EditStage.FAILED},
    EditStage.RESOLVED: {EditStage.TRANSFORMED, EditStage.FAILED},
    EditStage.TRANSFORMED: {EditStage.VALIDATED, EditStage.FAILED},
    EditStage.VALIDATED: {EditStage.COMMITTED, EditStage.FAILED},
    EditStage.COMMITTED: set(),
    EditStage.FAILED: set(),
}


class InvalidTransitionError(ValueError):
    """Raised when an invalid stage transition is attempted."""


@dataclass
class StageTracker:
    """Tracks the stage of one invocation and the path it took."""

    stage: EditStage = EditStage.START
    history: list[EditStage] = field(default_factory=lambda: [EditStage.START])

    def advance(self, target: EditStage) -> None:
        allowed = VALID_TRANSITIONS[self.stage]
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition from {self.stage.value} to {target.value}"
            )
        self.stage = target
        self.history.append(target)

    @property
    def is_terminal(self) -> bool:
        return not VALID_TRANSITIONS[self.stage]


@dataclass(frozen=True)
class Document:
    """A file as read at the start of an invocation."""

    path: str
    content: str
    existed: bool = True


@dataclass(frozen=True)
class Candidate:
    """A span of the document that may correspond to the search context."""

    start_offset: int
    end_offset: int
    start_line: int
    score: float

    def overlaps(self, other: Candidate) -> bool:
        return self.start_offset < other.end_offset and other.start_offset < self.end_offset

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_offset": self.start_offset,
            "end_offset": self.end_offset,
            "start_line": self.start_line,
            "score": round(self.score, 4),
        }


@dataclass
class MatchReport:
    """Matcher output: threshold survivors plus the best window overall."""

    candidates: list[Candidate] = field(default_factory=list)
    best: Candidate | None = None
    exact: bool = False


@dataclass
class EditRequest:
    """A caller's request to edit one file."""

    file_path: str
    new_content: str
    strategy: EditStrategy = EditStrategy.SINGLE_MATCH
    search_context: str = ""
    threshold: float = DEFAULT_THRESHOLD

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        default_threshold: float = DEFAULT_THRESHOLD,
        default_strategy: str = EditStrategy.SINGLE_MATCH.value,
    ) -> EditRequest:
        """Build a request from the wire shape.

        An empty strategy and an omitted or zero threshold take the defaults.
        Raises ValueError for an unknown strategy or a non-numeric threshold.
        """
        threshold = data.get("threshold")
        return cls(
            file_path=data.get("file_path") or "",
            new_content=data.get("new_content") or "",
            strategy=EditStrategy.parse(data.get("strategy") or default_strategy),
            search_context=data.get("search_context") or "",
            threshold=default_threshold if not threshold else float(threshold),
        )


@dataclass
class ValidationOutcome:
    """Result of running candidate content through the toolchain."""

    ok: bool
    diagnostics: list[str] = field(default_factory=list)
    content: str = ""
    kind: str = ""
    stage: str = ""  # pre-commit, post-format
    skipped: bool = False

    @property
    def diagnostic_text(self) -> str:
        return "\n".join(self.diagnostics)


@dataclass
class EditResult:
    """Outcome of one invocation."""

    status: EditStatus
    message: str
    kind: str = ""
    stage: EditStage = EditStage.START

    @property
    def is_error(self) -> bool:
        return self.status is EditStatus.FAILURE

    @classmethod
    def success(cls, message: str, stage: EditStage = EditStage.COMMITTED) -> EditResult:
        return cls(status=EditStatus.SUCCESS, message=message, stage=stage)

    @classmethod
    def failure(cls, kind: str, message: str, stage: EditStage = EditStage.FAILED) -> EditResult:
        return cls(status=EditStatus.FAILURE, message=message, kind=kind, stage=stage)

    def to_response(self) -> dict[str, Any]:
        """Transport-agnostic tool response."""
        return {"is_error": self.is_error, "message": self.message}
