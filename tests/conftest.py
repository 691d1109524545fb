"""Pytest configuration for codescalpel tests."""

import sys
from pathlib import Path

import pytest

# Ensure src/codescalpel is importable
src_path = str(Path(__file__).parent.parent / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from codescalpel.core.editing.engine import EditEngine  # noqa: E402
from codescalpel.core.editing.validator import Validator  # noqa: E402
from codescalpel.tools.base import Toolchain  # noqa: E402
from codescalpel.tools.fakes import FakeFormatter, FakeSyntaxChecker  # noqa: E402


@pytest.fixture
def fake_toolchain():
    return Toolchain(formatter=FakeFormatter(), checker=FakeSyntaxChecker())


@pytest.fixture
def fake_validator(fake_toolchain):
    return Validator({".go": fake_toolchain, ".py": fake_toolchain})


@pytest.fixture
def engine(fake_validator):
    return EditEngine(validator=fake_validator)
