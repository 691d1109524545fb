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
"""Ambiguity resolution for matcher candidates.

Overlapping windows are collapsed by non-maximal suppression, then the
strategy decides whether the survivors form a usable target set. When
nothing survives, the best sub-threshold window is rendered as a diff so
the caller can correct its search context instead of guessing.
"""

from __future__ import annotations

import difflib
import logging

from codescalpel.core.editing.errors import AmbiguousMatchError, NoMatchError
from codescalpel.core.editing.models import Candidate, EditStrategy, MatchReport

logger = logging.getLogger("codescalpel.core.editing.resolver")


def suppress_overlaps(candidates: list[Candidate]) -> list[Candidate]:
    """Keep the highest-scoring candidates that do not overlap each other."""
    ranked = sorted(candidates, key=lambda c: (-c.score, c.start_offset))
    accepted: list[Candidate] = []
    for candidate in ranked:
        if any(candidate.overlaps(kept) for kept in accepted):
            continue
        accepted.append(candidate)
    return accepted


def best_candidate_diff(
    pattern: str,
    content: str,
    best: Candidate,
    context_lines: int = 3,
) -> str:
    """Unified diff from the search context to the best window's text."""
    actual = content[best.start_offset : best.end_offset]
    diff = difflib.unified_diff(
        pattern.splitlines(),
        actual.splitlines(),
        fromfile="search_context",
        tofile=f"file (line {best.start_line})",
        n=context_lines,
        lineterm="",
    )
    return "\n".join(diff)


def _no_match_message(
    pattern: str,
    content: str,
    threshold: float,
    best: Candidate | None,
    diff: str,
) -> str:
    msg = (
        "No match found for search_context.\n\n"
        f"Original Content Size: {len(content)} bytes\n"
        f"Search Context Size: {len(pattern)} bytes\n"
        f"Threshold: {threshold:.2f}"
    )
    if best is None:
        return msg + "\nNo candidate window: search_context has more lines than the file."
    return (
        msg
        + f"\n\nBest candidate found at line {best.start_line} (score {best.score:.2f})."
        + "\nDiff:\n"
        + diff
    )


def resolve(
    report: MatchReport,
    strategy: EditStrategy,
    pattern: str,
    content: str,
    threshold: float,
    context_lines: int = 3,
) -> list[Candidate]:
    """Decide the edit targets for ``strategy``.

    Returns:
        Targets in ascending offset order.

    Raises:
        NoMatchError: nothing met the threshold.
        AmbiguousMatchError: single_match with several non-overlapping spans.
    """
    survivors = suppress_overlaps(report.candidates)

    if not survivors:
        diff = ""
        if report.best is not None:
            diff = best_candidate_diff(pattern, content, report.best, context_lines)
        raise NoMatchError(
            _no_match_message(pattern, content, threshold, report.best, diff),
            best=report.best,
            diff=diff,
        )

    targets = sorted(survivors, key=lambda c: c.start_offset)

    if strategy is EditStrategy.SINGLE_MATCH:
        if len(targets) > 1:
            lines = [c.start_line for c in targets]
            raise AmbiguousMatchError(
                f"Ambiguous match: found {len(lines)} occurrences. "
                "Please provide more context.\n"
                f"Matches at lines: {', '.join(str(n) for n in lines)}",
                lines=lines,
            )
        return targets

    if strategy is EditStrategy.REPLACE_ALL:
        logger.debug("replace_all resolved %d target(s)", len(targets))
        return targets

    if strategy is EditStrategy.OVERWRITE_FILE:
        raise ValueError("overwrite_file has no targets to resolve")

    raise ValueError(f"Unhandled strategy: {strategy!r}")
