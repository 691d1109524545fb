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
"""Subprocess runner shared by the toolchain adapters.

Content is piped through stdin and read back from stdout, so no temp file
is ever written next to the target. Every run honors a timeout and an
optional cancellation event; either one kills the child process.
"""

from __future__ import annotations

import logging
import subprocess
import threading
import time
from dataclasses import dataclass

from codescalpel.core.editing.errors import EditCancelledError, EditIOError

logger = logging.getLogger("codescalpel.tools.process")

DEFAULT_TIMEOUT = 30.0
POLL_INTERVAL = 0.1


@dataclass
class ToolRun:
    """Captured output of one tool invocation."""

    command: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stderr if present, else stdout."""
        return (self.stderr or self.stdout).strip()


def _kill(proc: subprocess.Popen) -> None:
    proc.kill()
    proc.communicate()


def run_tool(
    command: list[str],
    input_text: str = "",
    timeout: float = DEFAULT_TIMEOUT,
    cancel: threading.Event | None = None,
    cwd: str | None = None,
) -> ToolRun:
    """Run ``command`` feeding ``input_text`` on stdin.

    Raises:
        EditIOError: the executable could not be started.
        EditCancelledError: ``cancel`` was set or ``timeout`` elapsed.
    """
    if cancel is not None and cancel.is_set():
        raise EditCancelledError(f"Cancelled before running {command[0]}")

    start = time.time()
    try:
        proc = subprocess.Popen(
            command,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            cwd=cwd,
        )
    except FileNotFoundError:
        raise EditIOError(f"{command[0]} not found in PATH") from None
    except OSError as exc:
        raise EditIOError(f"Failed to start {command[0]}: {exc}") from exc

    deadline = start + timeout
    pending_input: str | None = input_text
    while True:
        try:
            stdout, stderr = proc.communicate(input=pending_input, timeout=POLL_INTERVAL)
            break
        except subprocess.TimeoutExpired:
            # Input is delivered on the first call only.
            pending_input = None
            if cancel is not None and cancel.is_set():
                _kill(proc)
                logger.warning("Cancelled %s", command[0])
                raise EditCancelledError(f"{command[0]} was cancelled") from None
            if time.time() >= deadline:
                _kill(proc)
                logger.warning("%s timed out after %.1fs", command[0], timeout)
                raise EditCancelledError(f"{command[0]} timed out after {timeout:g}s") from None

    run = ToolRun(
        command=list(command),
        returncode=proc.returncode,
        stdout=stdout or "",
        stderr=stderr or "",
        duration_ms=int((time.time() - start) * 1000),
    )
    logger.debug("%s exited %d in %dms", command[0], run.returncode, run.duration_ms)
    return run
