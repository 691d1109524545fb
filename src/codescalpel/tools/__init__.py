"""
Toolchain collaborators -- syntax checkers and formatters per language.

Subprocess-backed adapters for Python (Ruff) and Go (gofmt/goimports),
plus in-memory fakes for tests.
"""

from codescalpel.tools.base import FormatError, Formatter, SyntaxChecker, Toolchain
from codescalpel.tools.fakes import FakeFormatter, FakeSyntaxChecker
from codescalpel.tools.go_tools import GofmtSyntaxChecker, GoimportsFormatter
from codescalpel.tools.python_tools import PythonSyntaxChecker, RuffFormatter, RuffSyntaxChecker

__all__ = [
    "FormatError",
    "Formatter",
    "SyntaxChecker",
    "Toolchain",
    "FakeFormatter",
    "FakeSyntaxChecker",
    "GofmtSyntaxChecker",
    "GoimportsFormatter",
    "PythonSyntaxChecker",
    "RuffFormatter",
    "RuffSyntaxChecker",
]
