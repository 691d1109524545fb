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
"""Edit tool API routes.

Provides endpoints for:
  - Applying an edit to one file (``POST /api/tools/edit_code``)
  - Describing the tool for agent clients (``GET /api/tools/edit_code/schema``)

Engine failures are normal responses with ``is_error: true``; only a
malformed body is rejected by request validation (422).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from codescalpel.core.config import load_config
from codescalpel.core.editing.engine import EditEngine
from codescalpel.core.editing.models import EditStrategy

logger = logging.getLogger("codescalpel.api.routes.edit")

router = APIRouter(prefix="/api/tools", tags=["tools"])

TOOL_DESCRIPTION = (
    "Smart file editing tool.\n"
    "Use 'single_match' (default) to replace one code block; give enough "
    "'search_context' to identify it uniquely.\n"
    "Use 'replace_all' to replace every occurrence of the search context.\n"
    "Use 'overwrite_file' to rewrite or create the entire file.\n"
    "Fuzzy matching tolerates indentation drift and small typos. Source files "
    "are formatted and syntax-checked before saving; invalid edits are not written."
)

# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------


class EditCodeRequest(BaseModel):
    file_path: str = Field(min_length=1)
    strategy: EditStrategy | None = None
    search_context: str | None = None
    new_content: str = ""
    threshold: float | None = Field(default=None, ge=0.0, le=1.0)


class EditCodeResponse(BaseModel):
    is_error: bool
    message: str


# ---------------------------------------------------------------------------
# Engine dependency
# ---------------------------------------------------------------------------

_engine: EditEngine | None = None


def get_engine() -> EditEngine:
    """Lazy-init the shared engine from the user's config."""
    global _engine
    if _engine is None:
        live_log = None
        try:
            from codescalpel.core.logging import get_logger

            live_log = get_logger()
        except OSError as e:
            logger.warning("Live log unavailable: %s", e)
        _engine = EditEngine(config=load_config(), live_log=live_log)
    return _engine


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/edit_code", response_model=EditCodeResponse)
def edit_code(request: EditCodeRequest, engine: EditEngine = Depends(get_engine)) -> dict:
    """Apply one edit. Runs in the threadpool; the engine blocks on I/O."""
    return engine.handle(request.model_dump(exclude_none=True))


@router.get("/edit_code/schema")
async def edit_code_schema() -> dict:
    """Tool name, description and input schema for agent clients."""
    return {
        "name": "edit_code",
        "description": TOOL_DESCRIPTION,
        "strategies": [s.value for s in EditStrategy],
        "input_schema": EditCodeRequest.model_json_schema(),
    }
