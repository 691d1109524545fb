"""Unit tests for EditEngine -- end-to-end pipeline against in-memory fakes."""

import threading
from unittest.mock import MagicMock

import pytest

from codescalpel.core.config import EngineConfig
from codescalpel.core.editing.engine import EditEngine
from codescalpel.core.editing.matcher import find_fuzzy
from codescalpel.core.editing.models import EditRequest, EditStage, EditStrategy

BLOCK = [
    "func compute(a, b int) int {",
    "\tsum := a + b",
    "\tif sum > 10 {",
    "\t\treturn sum * 2",
    "\t}",
    "\tfor i := 0; i < b; i++ {",
    "\t\tsum += i",
    "\t}",
    "\treturn sum",
    "}",
]

DUPLICATED = "package main\n\nfunc a() {\n\tx := 1\n}\n\nfunc a() {\n\tx := 1\n}\n"
DUPLICATE_BLOCK = "func a() {\n\tx := 1\n}"


def _write(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


class TestSingleMatch:
    def test_replaces_function(self, engine, tmp_path):
        path = _write(tmp_path, "main.go", "package main\n\nfunc old() {}\n")
        result = engine.edit(
            EditRequest(file_path=str(path), search_context="func old() {}", new_content="func new() {}")
        )
        assert result.is_error is False
        assert result.message == "Success: File updated. (Strategy: single_match)"
        assert result.stage is EditStage.COMMITTED
        assert path.read_text(encoding="utf-8") == "package main\n\nfunc new() {}\n"

    def test_output_is_formatted(self, engine, tmp_path):
        path = _write(tmp_path, "main.go", "package main\n\nvar x = 1\n")
        result = engine.edit(
            EditRequest(file_path=str(path), search_context="var x = 1", new_content="var x = 2   ")
        )
        assert not result.is_error
        assert path.read_text(encoding="utf-8") == "package main\n\nvar x = 2\n"

    def test_fuzzy_tolerates_indentation(self, engine, tmp_path):
        path = _write(tmp_path, "main.go", "package main\n\nfunc f() {\n\treturn\n}\n")
        result = engine.edit(
            EditRequest(
                file_path=str(path),
                search_context="func f() {\n    return\n}",
                new_content="func f() {\n\treturn\n\t// done\n}",
            )
        )
        assert not result.is_error, result.message
        assert path.read_text(encoding="utf-8") == "package main\n\nfunc f() {\n\treturn\n\t// done\n}\n"


class TestAmbiguityBoundary:
    def test_single_match_reports_both_lines(self, engine, tmp_path):
        path = _write(tmp_path, "dup.go", DUPLICATED)
        result = engine.edit(
            EditRequest(file_path=str(path), search_context=DUPLICATE_BLOCK, new_content="func b() {}")
        )
        assert result.is_error
        assert result.kind == "AmbiguousMatch"
        assert result.message.startswith("AmbiguousMatch: Ambiguous match: found 2 occurrences.")
        assert "Matches at lines: 3, 7" in result.message
        assert path.read_text(encoding="utf-8") == DUPLICATED

    def test_replace_all_replaces_both(self, engine, tmp_path):
        path = _write(tmp_path, "dup.go", DUPLICATED)
        result = engine.edit(
            EditRequest(
                file_path=str(path),
                strategy=EditStrategy.REPLACE_ALL,
                search_context=DUPLICATE_BLOCK,
                new_content="func b() {}",
            )
        )
        assert not result.is_error
        assert "Replaced 2 occurrence(s)." in result.message
        assert path.read_text(encoding="utf-8") == "package main\n\nfunc b() {}\n\nfunc b() {}\n"


class TestOverwrite:
    def test_idempotent(self, engine, tmp_path):
        path = _write(tmp_path, "main.go", "junk that is not go\n")
        content = "package main\n\nfunc main() {}\n"
        request = EditRequest(file_path=str(path), strategy=EditStrategy.OVERWRITE_FILE, new_content=content)

        first = engine.edit(request)
        assert not first.is_error
        assert path.read_text(encoding="utf-8") == content

        second = engine.edit(request)
        assert not second.is_error
        assert path.read_text(encoding="utf-8") == content

    def test_creates_missing_file_and_parents(self, engine, tmp_path):
        path = tmp_path / "pkg" / "sub" / "new.go"
        result = engine.edit(
            EditRequest(file_path=str(path), strategy=EditStrategy.OVERWRITE_FILE, new_content="package sub\n")
        )
        assert result.message == "Success: File created. (Strategy: overwrite_file)"
        assert path.read_text(encoding="utf-8") == "package sub\n"

    def test_invalid_new_file_not_created(self, engine, tmp_path):
        path = tmp_path / "new.go"
        result = engine.edit(
            EditRequest(file_path=str(path), strategy=EditStrategy.OVERWRITE_FILE, new_content="func ((((\n")
        )
        assert result.kind == "SyntaxError"
        assert not path.exists()


class TestNoPartialWrites:
    def test_syntax_error_leaves_file_identical(self, engine, tmp_path):
        original = b"package main\r\n\r\nfunc old() {}\r\n"
        path = tmp_path / "main.go"
        path.write_bytes(original)

        result = engine.edit(
            EditRequest(file_path=str(path), search_context="func old() {}", new_content="func ((((")
        )

        assert result.is_error
        assert result.kind == "SyntaxError"
        assert result.message.startswith("SyntaxError: Syntax Error (post-format):")
        assert ":3:6: unexpected '(((('" in result.message
        assert path.read_bytes() == original
        assert [p.name for p in tmp_path.iterdir()] == ["main.go"]

    def test_pre_commit_syntax_error(self, fake_toolchain, tmp_path):
        from codescalpel.core.editing.validator import Validator
        from codescalpel.tools.base import Toolchain
        from codescalpel.tools.fakes import FakeFormatter

        toolchain = Toolchain(FakeFormatter(fail_tokens=("((((",)), fake_toolchain.checker)
        engine = EditEngine(validator=Validator({".go": toolchain}))
        path = _write(tmp_path, "main.go", "package main\n")

        result = engine.edit(
            EditRequest(file_path=str(path), search_context="package main", new_content="package ((((")
        )
        assert result.message.startswith("SyntaxError: Syntax Error (pre-commit):")
        assert path.read_text(encoding="utf-8") == "package main\n"

    def test_formatter_error(self, fake_toolchain, tmp_path):
        from codescalpel.core.editing.validator import Validator
        from codescalpel.tools.base import Toolchain
        from codescalpel.tools.fakes import FakeFormatter

        toolchain = Toolchain(FakeFormatter(fail_tokens=("BOOM",)), fake_toolchain.checker)
        engine = EditEngine(validator=Validator({".go": toolchain}))
        path = _write(tmp_path, "main.go", "package main\n")

        result = engine.edit(
            EditRequest(file_path=str(path), search_context="package main", new_content="package BOOM")
        )
        assert result.kind == "FormatterError"
        assert path.read_text(encoding="utf-8") == "package main\n"

    def test_cancelled_run_writes_nothing(self, engine, tmp_path):
        path = _write(tmp_path, "main.go", "package main\n\nfunc old() {}\n")
        cancel = threading.Event()
        cancel.set()
        result = engine.edit(
            EditRequest(file_path=str(path), search_context="func old() {}", new_content="func new() {}"),
            cancel=cancel,
        )
        assert result.kind == "Cancelled"
        assert path.read_text(encoding="utf-8") == "package main\n\nfunc old() {}\n"


class TestThresholdBoundary:
    def _setup(self, tmp_path):
        path = _write(tmp_path, "calc.go", "package main\n\n" + "\n".join(BLOCK) + "\n")
        search = "\n".join(BLOCK).replace("sum * 2", "sum * 3")
        score = find_fuzzy(path.read_text(encoding="utf-8"), search, 0.0).best.score
        return path, search, score

    def test_score_above_default(self, tmp_path):
        _, _, score = self._setup(tmp_path)
        assert 0.85 <= score < 1.0

    def test_threshold_equal_to_score_matches(self, engine, tmp_path):
        path, search, score = self._setup(tmp_path)
        result = engine.edit(
            EditRequest(
                file_path=str(path),
                search_context=search,
                new_content="func compute(a, b int) int {\n\treturn a * b\n}",
                threshold=score,
            )
        )
        assert not result.is_error, result.message
        assert path.read_text(encoding="utf-8") == (
            "package main\n\nfunc compute(a, b int) int {\n\treturn a * b\n}\n"
        )

    def test_threshold_above_score_reports_block(self, engine, tmp_path):
        path, search, score = self._setup(tmp_path)
        before = path.read_text(encoding="utf-8")
        result = engine.edit(
            EditRequest(
                file_path=str(path),
                search_context=search,
                new_content="func compute() {}",
                threshold=min(1.0, score + 0.001),
            )
        )
        assert result.kind == "NoMatch"
        assert result.message.startswith("NoMatch: No match found for search_context.")
        assert "Best candidate found at line 3" in result.message
        assert "Diff:" in result.message
        assert "-\t\treturn sum * 3" in result.message
        assert "+\t\treturn sum * 2" in result.message
        assert path.read_text(encoding="utf-8") == before


class TestInvalidRequests:
    def test_missing_search_context(self, engine, tmp_path):
        path = _write(tmp_path, "main.go", "package main\n")
        result = engine.edit(EditRequest(file_path=str(path), new_content="x"))
        assert result.kind == "InvalidRequest"
        assert "search_context is required" in result.message

    def test_missing_file(self, engine, tmp_path):
        result = engine.edit(
            EditRequest(file_path=str(tmp_path / "nope.go"), search_context="a", new_content="b")
        )
        assert result.kind == "InvalidRequest"
        assert "File does not exist" in result.message
        assert not (tmp_path / "nope.go").exists()

    def test_directory(self, engine, tmp_path):
        result = engine.edit(
            EditRequest(file_path=str(tmp_path), strategy=EditStrategy.OVERWRITE_FILE, new_content="b")
        )
        assert result.kind == "InvalidRequest"

    def test_threshold_out_of_range(self, engine, tmp_path):
        path = _write(tmp_path, "main.go", "package main\n")
        result = engine.edit(
            EditRequest(file_path=str(path), search_context="package", new_content="x", threshold=1.5)
        )
        assert result.kind == "InvalidRequest"

    def test_empty_file_path(self, engine):
        result = engine.edit(EditRequest(file_path="", new_content="x"))
        assert result.kind == "InvalidRequest"
        assert result.stage is EditStage.FAILED


class TestHandle:
    def test_wire_round_trip(self, engine, tmp_path):
        path = _write(tmp_path, "main.go", "package main\n\nfunc old() {}\n")
        response = engine.handle(
            {
                "file_path": str(path),
                "search_context": "func old() {}",
                "new_content": "func new() {}",
                "threshold": 0,
            }
        )
        assert response == {"is_error": False, "message": "Success: File updated. (Strategy: single_match)"}

    def test_unknown_strategy(self, engine, tmp_path):
        response = engine.handle({"file_path": str(tmp_path / "a.go"), "strategy": "patch"})
        assert response["is_error"] is True
        assert response["message"].startswith("InvalidRequest: Unknown strategy 'patch'")


class TestNonSourceFiles:
    def test_unvalidated_extension(self, tmp_path):
        engine = EditEngine(config=EngineConfig(toolchains={}))
        path = _write(tmp_path, "notes.txt", "hello ((((\n")
        result = engine.edit(EditRequest(file_path=str(path), search_context="hello", new_content="bye"))
        assert not result.is_error
        assert "No validation for '.txt' files." in result.message
        assert path.read_text(encoding="utf-8") == "bye ((((\n"

    def test_preserves_crlf(self, tmp_path):
        engine = EditEngine(config=EngineConfig(toolchains={}))
        path = tmp_path / "notes.txt"
        path.write_bytes(b"one\r\ntwo\r\n")
        engine.edit(EditRequest(file_path=str(path), search_context="two", new_content="2"))
        assert path.read_bytes() == b"one\r\n2\r\n"


def test_live_log_receives_outcomes(fake_validator, tmp_path):
    live_log = MagicMock()
    engine = EditEngine(validator=fake_validator, live_log=live_log)
    path = _write(tmp_path, "main.go", "package main\n")

    engine.edit(EditRequest(file_path=str(path), search_context="package main", new_content="package app"))
    engine.edit(EditRequest(file_path=str(path), search_context="missing", new_content="x", threshold=1.0))

    actions = [c.args[0] for c in live_log.edit.call_args_list]
    assert actions == ["committed", "failed"]
    live_log.validation.assert_called_once()


@pytest.mark.parametrize("strategy", list(EditStrategy))
def test_every_strategy_handled(engine, tmp_path, strategy):
    path = _write(tmp_path, "main.go", "package main\n")
    result = engine.edit(
        EditRequest(file_path=str(path), strategy=strategy, search_context="package main", new_content="package x")
    )
    assert not result.is_error, result.message
    assert path.read_text(encoding="utf-8") == "package x\n"


class TestFileSystemEdgeCases:
    def test_overwrite_non_utf8_file(self, tmp_path):
        engine = EditEngine(config=EngineConfig(toolchains={}))
        path = tmp_path / "blob.txt"
        path.write_bytes(b"\xff\xfe\x00legacy")
        request = EditRequest(file_path=str(path), strategy=EditStrategy.OVERWRITE_FILE, new_content="C\n")

        first = engine.edit(request)
        assert first.message.startswith("Success: File updated. (Strategy: overwrite_file)")
        assert path.read_bytes() == b"C\n"

        second = engine.edit(request)
        assert not second.is_error
        assert path.read_bytes() == b"C\n"

    def test_edit_through_symlink(self, engine, tmp_path):
        real = _write(tmp_path, "real.go", "package main\n\nfunc old() {}\n")
        link = tmp_path / "link.go"
        link.symlink_to(real)

        result = engine.edit(
            EditRequest(file_path=str(link), search_context="func old() {}", new_content="func new() {}")
        )

        assert not result.is_error, result.message
        assert link.is_symlink()
        assert real.read_text(encoding="utf-8") == "package main\n\nfunc new() {}\n"

    def test_whitespace_pattern_does_not_hit_blank_lines(self, tmp_path):
        engine = EditEngine(config=EngineConfig(toolchains={}))
        path = _write(tmp_path, "notes.txt", "a\n\nb\n\n")
        result = engine.edit(
            EditRequest(
                file_path=str(path),
                strategy=EditStrategy.REPLACE_ALL,
                search_context="   ",
                new_content="INSERTED",
            )
        )
        assert result.kind == "NoMatch"
        assert path.read_text(encoding="utf-8") == "a\n\nb\n\n"
