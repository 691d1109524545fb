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
CodeScalpel -- Live Edit Log

A rotating file that users can tail to see what was done to their files and
why an edit was refused. WARNING and above are mirrored to stderr.

    ~/.codescalpel/logs/codescalpel.log      (CODESCALPEL_HOME moves it)

Usage:
    from codescalpel.core.logging import get_logger
    log = get_logger()
    log.edit("committed", file_path="main.go", strategy="single_match")
    log.validation("main.go", ok=False, diagnostics=2)
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

LOG_DIR = Path(os.environ.get("CODESCALPEL_HOME", Path.home() / ".codescalpel")) / "logs"
LOG_FILE_NAME = "codescalpel.log"
MAX_LOG_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5


def _render(key: str, value: Any) -> str:
    if isinstance(value, str):
        return f'{key}="{value}"'
    if isinstance(value, float):
        return f"{key}={value:.3f}"
    return f"{key}={value}"


class ScalpelLogFormatter(logging.Formatter):
    """``time | tag | component | message | key=value ...``

    2026-02-09T17:30:45.123Z | EDIT  | Engine       | Edit committed | file="main.go"
    """

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, timezone.utc)
        when = stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        tag = getattr(record, "tag", record.levelname)
        component = getattr(record, "component", "System")
        line = f"{when} | {tag:<5} | {component:<12} | {record.getMessage()}"
        fields = getattr(record, "fields", None)
        if fields:
            line += " | " + " ".join(_render(k, v) for k, v in fields.items())
        return line


class ScalpelLogger:
    """Edit outcomes, validation verdicts and API traffic, one line each."""

    def __init__(self, log_dir: Path | None = None):
        directory = Path(log_dir) if log_dir else LOG_DIR
        directory.mkdir(parents=True, exist_ok=True)
        self._log_file = directory / LOG_FILE_NAME

        self._logger = logging.getLogger("codescalpel.live")
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()

        formatter = ScalpelLogFormatter()
        to_file = logging.handlers.RotatingFileHandler(
            str(self._log_file), maxBytes=MAX_LOG_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
        )
        to_stderr = logging.StreamHandler(sys.stderr)
        to_stderr.setLevel(logging.WARNING)
        for handler in (to_file, to_stderr):
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

        self.info("System", "Logger initialized", log_file=str(self._log_file))

    @property
    def log_file(self) -> str:
        return str(self._log_file)

    def _emit(self, level: int, tag: str, component: str, message: str, fields: dict[str, Any]) -> None:
        self._logger.log(level, message, extra={"tag": tag, "component": component, "fields": fields})

    def info(self, component: str, message: str, **fields: Any) -> None:
        self._emit(logging.INFO, "INFO", component, message, fields)

    def edit(self, action: str, file_path: str = "", success: bool = True, **fields: Any) -> None:
        """One line per finished edit; failures are warnings."""
        fields = {"action": action, "file": file_path, **fields}
        if success:
            self._emit(logging.INFO, "EDIT", "Engine", f"Edit {action}", fields)
        else:
            self._emit(logging.WARNING, "EDIT-", "Engine", f"Edit {action}", fields)

    def validation(self, file_path: str, ok: bool = True, diagnostics: int = 0) -> None:
        level = logging.INFO if ok else logging.WARNING
        verdict = "passed" if ok else "failed"
        fields = {"file": file_path, "ok": ok, "diagnostics": diagnostics}
        self._emit(level, "VALID", "Validator", f"Validation {verdict}", fields)

    def server_start(self, host: str = "", port: int = 0, **fields: Any) -> None:
        self._emit(logging.INFO, "BOOT", "Server", "API server started", {"host": host, "port": port, **fields})

    def http_request(self, method: str, path: str, status: int = 200, latency_ms: int = 0) -> None:
        level = logging.INFO if status < 400 else logging.WARNING
        fields = {"method": method, "path": path, "status": status, "latency_ms": latency_ms}
        self._emit(level, "HTTP", "Server", f"{method} {path} -> {status}", fields)


_instance: ScalpelLogger | None = None


def get_logger(log_dir: Path | None = None) -> ScalpelLogger:
    """Shared ScalpelLogger, created on first use."""
    global _instance
    if _instance is None:
        _instance = ScalpelLogger(log_dir=log_dir)
    return _instance
