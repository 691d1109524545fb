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
CodeScalpel -- Matcher

Locates the spans of a document that correspond to a search context.

STEPS:
    1. EXACT FAST PATH -- verbatim occurrence(s), score exactly 1.0
    2. FUZZY WINDOWS   -- slide a window of the pattern's line count over the
                          document and score it line by line
    3. OFFSET MAPPING  -- turn surviving line windows back into offsets
    4. ORDERING        -- descending score, ties by ascending start offset

Line similarity is the normalized Levenshtein ratio of the stripped lines,
so indentation drift and small typos still score high while structurally
different lines do not. The scorer is a standalone unit and can be tuned
without touching the window logic.
"""

from __future__ import annotations

import logging
import threading

from rapidfuzz.distance import Levenshtein

from codescalpel.core.editing.errors import EditCancelledError
from codescalpel.core.editing.models import Candidate, MatchReport

logger = logging.getLogger("codescalpel.core.editing.matcher")


# =============================================================================
# SCORING
# =============================================================================


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings (insert/delete/substitute cost 1)."""
    return Levenshtein.distance(a, b)


def line_similarity(a: str, b: str) -> float:
    """Similarity of two lines in [0, 1], ignoring surrounding whitespace."""
    a = a.strip()
    b = b.strip()
    if a == b:
        return 1.0
    return 1.0 - levenshtein(a, b) / max(len(a), len(b), 1)


def window_score(window: list[str], pattern: list[str]) -> float:
    """Mean line similarity of two equally long line lists."""
    if not pattern:
        return 0.0
    total = sum(line_similarity(w, p) for w, p in zip(window, pattern))
    return total / len(pattern)


# =============================================================================
# OFFSETS
# =============================================================================


def line_starts(lines: list[str]) -> list[int]:
    """Offset of the first character of each line (``\\n`` terminated)."""
    starts = []
    offset = 0
    for line in lines:
        starts.append(offset)
        offset += len(line) + 1
    return starts


def line_of_offset(content: str, offset: int) -> int:
    """1-based line number containing ``offset``."""
    return content.count("\n", 0, offset) + 1


def _pattern_lines(pattern: str) -> list[str]:
    lines = pattern.split("\n")
    # A single trailing newline terminates the last line, it is not a line.
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()
    return lines


# =============================================================================
# PUBLIC API
# =============================================================================


def find_exact(content: str, pattern: str, find_all: bool = False) -> list[Candidate]:
    """Verbatim occurrences of ``pattern`` (non-overlapping, left to right)."""
    matches: list[Candidate] = []
    if not pattern:
        return matches

    idx = content.find(pattern)
    while idx != -1:
        matches.append(
            Candidate(
                start_offset=idx,
                end_offset=idx + len(pattern),
                start_line=line_of_offset(content, idx),
                score=1.0,
            )
        )
        if not find_all:
            break
        idx = content.find(pattern, idx + len(pattern))
    return matches


def find_fuzzy(
    content: str,
    pattern: str,
    threshold: float,
    cancel: threading.Event | None = None,
) -> MatchReport:
    """Score every line window of ``content`` against ``pattern``.

    Windows made only of blank lines are never candidates: they would map to
    empty spans that cannot overlap anything.

    Raises:
        EditCancelledError: ``cancel`` was set while scoring.
    """
    content_lines = content.split("\n")
    pattern_lines = _pattern_lines(pattern)
    size = len(pattern_lines)

    report = MatchReport()
    if size == 0 or size > len(content_lines):
        return report

    starts = line_starts(content_lines)
    for i in range(len(content_lines) - size + 1):
        if cancel is not None and cancel.is_set():
            raise EditCancelledError("Cancelled while matching; file left unchanged")
        window = content_lines[i : i + size]
        if not any(line.strip() for line in window):
            continue
        score = window_score(window, pattern_lines)
        last = i + size - 1
        candidate = Candidate(
            start_offset=starts[i],
            end_offset=min(starts[last] + len(content_lines[last]), len(content)),
            start_line=i + 1,
            score=score,
        )
        if report.best is None or score > report.best.score:
            report.best = candidate
        if score >= threshold:
            report.candidates.append(candidate)

    report.candidates.sort(key=lambda c: (-c.score, c.start_offset))
    return report


def find_candidates(
    content: str,
    pattern: str,
    threshold: float,
    find_all: bool = False,
    cancel: threading.Event | None = None,
) -> MatchReport:
    """Locate candidate spans for ``pattern``.

    Args:
        content: Document text.
        pattern: Search context (non-empty; rejected upstream otherwise).
        threshold: Minimum window score for a fuzzy candidate.
        find_all: Return every exact occurrence instead of the first.
        cancel: Checked between fuzzy windows.

    Returns:
        MatchReport with survivors sorted by descending score and the best
        window found regardless of threshold.
    """
    exact = find_exact(content, pattern, find_all=find_all)
    if exact:
        logger.debug("Exact match for search context (%d occurrence(s))", len(exact))
        return MatchReport(candidates=exact, best=exact[0], exact=True)

    report = find_fuzzy(content, pattern, threshold, cancel=cancel)
    logger.debug(
        "Fuzzy match: %d candidate(s) >= %.2f, best=%s",
        len(report.candidates),
        threshold,
        f"{report.best.score:.3f}@L{report.best.start_line}" if report.best else "none",
    )
    return report
