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
CodeScalpel -- Toolchain Collaborator Interfaces

The engine never parses or formats source itself. It talks to two small
collaborators per language:

  1. SyntaxChecker -- returns ``file:line:col: message`` diagnostics, empty
                      when the content parses
  2. Formatter     -- returns canonical content or raises FormatError

Each has a subprocess-backed implementation and an in-memory fake.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass


class FormatError(Exception):
    """Formatter rejected its input."""

    def __init__(self, message: str, output: str = ""):
        super().__init__(message)
        self.output = output or message


class SyntaxChecker(ABC):
    """Language-aware syntax checker."""

    name = "checker"

    @abstractmethod
    def check(
        self,
        path: str,
        content: str,
        cancel: threading.Event | None = None,
    ) -> list[str]:
        """Return diagnostics for ``content``; empty when it is valid."""


class Formatter(ABC):
    """Canonical formatter / import fixer. Must be a pure function of input."""

    name = "formatter"

    @abstractmethod
    def format(
        self,
        path: str,
        content: str,
        cancel: threading.Event | None = None,
    ) -> str:
        """Return formatted content or raise FormatError."""


@dataclass
class Toolchain:
    """The formatter and checker registered for one file extension."""

    formatter: Formatter
    checker: SyntaxChecker
