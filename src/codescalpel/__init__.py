"""
CodeScalpel -- Fuzzy-matching, validating single-file edit engine.

CodeScalpel locates an edit site with exact or fuzzy line-window matching,
refuses ambiguous targets, applies one of three strategies, and only writes
the file after the result passes a formatter and a syntax check.
"""

__version__ = "1.2.0"
__author__ = "CodeScalpel Team"
