"""
CodeScalpel -- API Server

FastAPI server exposing the edit engine as a remote-callable tool.

Run with: uvicorn codescalpel.api.server:app --port 8000
"""

import logging
import time

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from codescalpel import __version__
from codescalpel.api.routes.edit import router as edit_router

logger = logging.getLogger("codescalpel.api.server")

app = FastAPI(
    title="CodeScalpel API",
    description="Fuzzy-matching, validating single-file edit tool",
    version=__version__,
)


# =============================================================================
# LIVE LOGGER
# =============================================================================

_live_log = None


def _get_live_log():
    """Lazy-init the ScalpelLogger."""
    global _live_log
    if _live_log is None:
        try:
            from codescalpel.core.logging import get_logger

            _live_log = get_logger()
        except OSError as e:
            logger.warning("Live log unavailable: %s", e)
    return _live_log


# =============================================================================
# HTTP REQUEST LOGGING MIDDLEWARE
# =============================================================================


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status, and latency."""

    async def dispatch(self, request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        latency_ms = int((time.time() - start) * 1000)
        path = request.url.path
        log = _get_live_log()
        if log and path != "/api/health":
            log.http_request(
                method=request.method,
                path=path,
                status=response.status_code,
                latency_ms=latency_ms,
            )
        return response


app.add_middleware(RequestLoggingMiddleware)
app.include_router(edit_router)


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "version": __version__}


def run(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Serve the API with uvicorn (blocking)."""
    import uvicorn

    log = _get_live_log()
    if log:
        log.server_start(host=host, port=port, version=__version__)
    uvicorn.run(app, host=host, port=port, log_level="info")
