"""
Edit Pipeline -- Matching, ambiguity resolution, strategies, validation, commit.

Locates an edit site exactly or fuzzily, refuses ambiguous targets, applies
the requested strategy, and writes only content that passed the toolchain.
Entry point: ``codescalpel.core.editing.engine.EditEngine``.
"""
