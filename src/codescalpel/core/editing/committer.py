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
"""Document I/O: read once, write atomically.

Writes go to a temporary sibling and are moved into place with
``os.replace``, so readers see either the old bytes or the new bytes and
never a truncated file. Only validated content ever reaches ``commit``.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path

from codescalpel.core.editing.errors import EditIOError, InvalidRequestError
from codescalpel.core.editing.models import Document, EditStrategy

logger = logging.getLogger("codescalpel.core.editing.committer")


def read_document(path: str, strategy: EditStrategy) -> Document:
    """Read the target file. A missing file is only allowed when creating.

    Overwrites never look at the old content, so only existence is checked
    and files in any encoding can be replaced.
    """
    target = Path(path)
    if target.is_dir():
        raise InvalidRequestError(f"Path is a directory: {path}")

    if strategy is EditStrategy.OVERWRITE_FILE:
        return Document(path=path, content="", existed=target.exists())

    try:
        # newline="" keeps \r\n intact so offsets map to the bytes on disk.
        with open(target, encoding="utf-8", newline="") as fh:
            return Document(path=path, content=fh.read(), existed=True)
    except FileNotFoundError:
        if strategy.may_create:
            return Document(path=path, content="", existed=False)
        raise InvalidRequestError(f"File does not exist: {path}") from None
    except UnicodeDecodeError as exc:
        raise EditIOError(f"Failed to read file {path}: not valid UTF-8 ({exc.reason})") from exc
    except OSError as exc:
        raise EditIOError(f"Failed to read file {path}: {exc}") from exc


def commit(path: str, content: str, create_parents: bool = False) -> None:
    """Persist ``content`` to ``path`` atomically.

    A symlinked path is written through: the link stays and the file it
    points to receives the new content.
    """
    target = Path(path).resolve()
    parent = target.parent

    if not parent.exists():
        if not create_parents:
            raise EditIOError(f"Directory does not exist: {parent}")
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise EditIOError(f"Failed to create directory {parent}: {exc}") from exc

    mode = 0o644
    if target.exists():
        mode = stat.S_IMODE(target.stat().st_mode)

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(parent))
    except OSError as exc:
        raise EditIOError(f"Failed to write file {path}: {exc}") from exc

    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, target)
    except OSError as exc:
        try:
            os.unlink(tmp_name)
        except OSError:
            logger.warning("Could not remove temp file %s", tmp_name)
        raise EditIOError(f"Failed to write file {path}: {exc}") from exc

    logger.debug("Committed %d chars to %s", len(content), target)
