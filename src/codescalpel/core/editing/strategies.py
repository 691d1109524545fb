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
"""Strategy executor: produce new document content from resolved targets."""

from __future__ import annotations

from codescalpel.core.editing.models import Candidate, EditStrategy


def splice(content: str, target: Candidate, replacement: str) -> str:
    """Replace one span of ``content``."""
    return content[: target.start_offset] + replacement + content[target.end_offset :]


def apply_strategy(
    content: str,
    targets: list[Candidate],
    replacement: str,
    strategy: EditStrategy,
) -> str:
    """Return the candidate new content. ``content`` is never modified."""
    if strategy is EditStrategy.OVERWRITE_FILE:
        return replacement

    if strategy is EditStrategy.SINGLE_MATCH:
        if len(targets) != 1:
            raise ValueError(f"single_match needs exactly one target, got {len(targets)}")
        return splice(content, targets[0], replacement)

    if strategy is EditStrategy.REPLACE_ALL:
        # Descending offsets: each splice leaves earlier offsets valid.
        ordered = sorted(targets, key=lambda c: c.start_offset, reverse=True)
        for later, earlier in zip(ordered, ordered[1:]):
            if earlier.overlaps(later):
                raise ValueError(
                    f"Overlapping targets at lines {earlier.start_line} and {later.start_line}"
                )
        result = content
        for target in ordered:
            result = splice(result, target, replacement)
        return result

    raise ValueError(f"Unhandled strategy: {strategy!r}")
