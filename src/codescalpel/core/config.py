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
"""Engine configuration schema.

Config location: ~/.codescalpel/config.yaml (``CODESCALPEL_HOME`` moves the
directory, ``CODESCALPEL_CONFIG`` points at a specific file).

Example::

    default_threshold: 0.85
    default_strategy: single_match
    tool_timeout_seconds: 30
    diff_context_lines: 3
    toolchains:
      .py: {formatter: ruff, checker: python}
      .go: {formatter: goimports, checker: gofmt}
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from codescalpel.core.editing.models import DEFAULT_THRESHOLD, EditStrategy
from codescalpel.core.editing.validator import Validator
from codescalpel.tools.base import Formatter, SyntaxChecker, Toolchain
from codescalpel.tools.fakes import FakeFormatter, FakeSyntaxChecker
from codescalpel.tools.go_tools import GofmtSyntaxChecker, GoimportsFormatter
from codescalpel.tools.python_tools import PythonSyntaxChecker, RuffFormatter, RuffSyntaxChecker

logger = logging.getLogger("codescalpel.core.config")

# ---------------------------------------------------------------------------
# Default paths
# ---------------------------------------------------------------------------
_SCALPEL_HOME = Path(os.environ.get("CODESCALPEL_HOME", Path.home() / ".codescalpel"))
DEFAULT_CONFIG_PATH = Path(os.environ.get("CODESCALPEL_CONFIG", _SCALPEL_HOME / "config.yaml"))

DEFAULT_TOOLCHAINS: dict[str, dict[str, str]] = {
    ".py": {"formatter": "ruff", "checker": "python"},
    ".go": {"formatter": "goimports", "checker": "gofmt"},
}


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------


@dataclass
class EngineConfig:
    """Tunable engine settings."""

    default_threshold: float = DEFAULT_THRESHOLD
    default_strategy: str = EditStrategy.SINGLE_MATCH.value
    tool_timeout_seconds: float = 30.0
    diff_context_lines: int = 3
    fix_imports: bool = True
    python_executable: str = ""
    toolchains: dict[str, dict[str, str]] = field(
        default_factory=lambda: {ext: dict(tc) for ext, tc in DEFAULT_TOOLCHAINS.items()}
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "default_threshold": self.default_threshold,
            "default_strategy": self.default_strategy,
            "tool_timeout_seconds": self.tool_timeout_seconds,
            "diff_context_lines": self.diff_context_lines,
            "fix_imports": self.fix_imports,
            "python_executable": self.python_executable,
            "toolchains": {ext: dict(tc) for ext, tc in self.toolchains.items()},
        }


def _parse_config(raw: dict[str, Any]) -> EngineConfig:
    """Parse a raw YAML dict into EngineConfig, keeping defaults for bad values."""
    config = EngineConfig()

    threshold = raw.get("default_threshold")
    if threshold is not None:
        try:
            value = float(threshold)
        except (TypeError, ValueError):
            value = -1.0
        if 0.0 < value <= 1.0:
            config.default_threshold = value
        else:
            logger.warning("Ignoring default_threshold %r (must be in (0, 1])", threshold)

    strategy = raw.get("default_strategy")
    if strategy:
        try:
            config.default_strategy = EditStrategy.parse(strategy).value
        except ValueError as exc:
            logger.warning("Ignoring default_strategy: %s", exc)

    timeout = raw.get("tool_timeout_seconds")
    if timeout is not None:
        config.tool_timeout_seconds = max(1.0, float(timeout))

    context = raw.get("diff_context_lines")
    if context is not None:
        config.diff_context_lines = max(0, int(context))

    config.fix_imports = bool(raw.get("fix_imports", config.fix_imports))
    config.python_executable = str(raw.get("python_executable") or "")

    toolchains = raw.get("toolchains")
    if isinstance(toolchains, dict):
        for ext, entry in toolchains.items():
            ext = str(ext).lower()
            if not ext.startswith("."):
                ext = "." + ext
            if entry is None:
                # An explicit null disables validation for the extension.
                config.toolchains.pop(ext, None)
            elif isinstance(entry, dict) and entry.get("formatter") and entry.get("checker"):
                config.toolchains[ext] = {
                    "formatter": str(entry["formatter"]),
                    "checker": str(entry["checker"]),
                }
            else:
                logger.warning("Ignoring toolchain for %s: needs formatter and checker", ext)

    return config


def load_config(path: Path | str | None = None) -> EngineConfig:
    """Load engine configuration from YAML file.

    If the file does not exist or cannot be parsed, returns the defaults.
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.debug("No config at %s -- using defaults", config_path)
        return EngineConfig()

    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        if raw is None:
            return EngineConfig()
        if not isinstance(raw, dict):
            logger.warning("Invalid config (not a mapping) at %s -- using defaults", config_path)
            return EngineConfig()
        return _parse_config(raw)
    except (OSError, TypeError, ValueError, yaml.YAMLError) as exc:
        logger.error("Failed to load config %s: %s -- using defaults", config_path, exc)
        return EngineConfig()


def save_config(config: EngineConfig, path: Path | str | None = None) -> None:
    """Save engine configuration to YAML file."""
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
    logger.info("Saved config to %s", config_path)


# ---------------------------------------------------------------------------
# Toolchain construction
# ---------------------------------------------------------------------------


def _make_formatter(name: str, config: EngineConfig) -> Formatter | None:
    timeout = config.tool_timeout_seconds
    python = config.python_executable or None
    if name == "ruff":
        return RuffFormatter(python=python, timeout=timeout, fix_imports=config.fix_imports)
    if name in ("goimports", "gofmt"):
        return GoimportsFormatter(binary=name, timeout=timeout)
    if name == "fake":
        return FakeFormatter()
    return None


def _make_checker(name: str, config: EngineConfig) -> SyntaxChecker | None:
    timeout = config.tool_timeout_seconds
    if name == "python":
        return PythonSyntaxChecker()
    if name == "ruff":
        return RuffSyntaxChecker(python=config.python_executable or None, timeout=timeout)
    if name == "gofmt":
        return GofmtSyntaxChecker(timeout=timeout)
    if name == "fake":
        return FakeSyntaxChecker()
    return None


def build_validator(config: EngineConfig | None = None) -> Validator:
    """Resolve configured toolchain names into a Validator."""
    config = config or EngineConfig()
    toolchains: dict[str, Toolchain] = {}
    for ext, entry in config.toolchains.items():
        formatter = _make_formatter(entry["formatter"], config)
        checker = _make_checker(entry["checker"], config)
        if formatter is None or checker is None:
            logger.error(
                "Unknown toolchain for %s (formatter=%s, checker=%s) -- skipped",
                ext,
                entry["formatter"],
                entry["checker"],
            )
            continue
        toolchains[ext] = Toolchain(formatter=formatter, checker=checker)
    return Validator(toolchains)
