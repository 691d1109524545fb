"""Unit tests for the strategy executor -- splicing and offset safety."""

import pytest

from codescalpel.core.editing.matcher import find_exact
from codescalpel.core.editing.models import Candidate, EditStrategy
from codescalpel.core.editing.strategies import apply_strategy, splice


def _c(start, end, line=1):
    return Candidate(start_offset=start, end_offset=end, start_line=line, score=1.0)


def test_splice():
    assert splice("hello world", _c(6, 11), "there") == "hello there"


def test_overwrite_ignores_targets():
    assert apply_strategy("old", [], "new", EditStrategy.OVERWRITE_FILE) == "new"


def test_single_match_requires_one_target():
    with pytest.raises(ValueError):
        apply_strategy("abc", [], "x", EditStrategy.SINGLE_MATCH)
    with pytest.raises(ValueError):
        apply_strategy("abc", [_c(0, 1), _c(2, 3)], "x", EditStrategy.SINGLE_MATCH)


def test_single_match_splices():
    assert apply_strategy("a-b-c", [_c(2, 3)], "BBB", EditStrategy.SINGLE_MATCH) == "a-BBB-c"


class TestReplaceAllOffsets:
    @pytest.mark.parametrize("replacement", ["", "z", "a much longer replacement"])
    def test_matches_reference(self, replacement):
        content = "call(x)\nfoo\ncall(x)\nbar call(x) baz\n"
        targets = find_exact(content, "call(x)", find_all=True)
        assert len(targets) == 3

        result = apply_strategy(content, targets, replacement, EditStrategy.REPLACE_ALL)

        assert result == content.replace("call(x)", replacement)
        assert len(result) == len(content) + len(targets) * (len(replacement) - len("call(x)"))

    def test_target_order_does_not_matter(self):
        content = "aXbXc"
        forward = [_c(1, 2), _c(3, 4)]
        assert apply_strategy(content, forward, "--", EditStrategy.REPLACE_ALL) == "a--b--c"
        assert apply_strategy(content, forward[::-1], "--", EditStrategy.REPLACE_ALL) == "a--b--c"

    def test_overlapping_targets_rejected(self):
        with pytest.raises(ValueError, match="Overlapping"):
            apply_strategy("abcdef", [_c(0, 3), _c(2, 5)], "x", EditStrategy.REPLACE_ALL)

    def test_input_untouched(self):
        content = "keep keep"
        apply_strategy(content, [_c(0, 4)], "drop", EditStrategy.REPLACE_ALL)
        assert content == "keep keep"
