"""
Request tracing for the catalog API.

Each request carries a request ID (taken from X-Request-ID or generated)
and the catalog lookup keys it was made with, bound to the structlog
context so every log line emitted while serving it can be correlated.
"""

import time
import uuid
from typing import Callable, Tuple

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from core.logging import bind_context, clear_context, get_logger


logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Query parameters that identify what a catalog request is about
TRACED_PARAMS: Tuple[str, ...] = ("slug", "category", "collection")

# Probes are polled constantly; their completions are logged at debug
QUIET_PATHS: Tuple[str, ...] = ("/health", "/ready", "/live")


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """
    Binds request_id, method, path and catalog keys for the request's logs,
    logs the outcome with its duration and echoes X-Request-ID back.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        path = request.url.path

        bind_context(request_id=request_id, method=request.method, path=path)
        traced = {
            name: request.query_params[name]
            for name in TRACED_PARAMS
            if request.query_params.get(name)
        }
        if traced:
            bind_context(**traced)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=_elapsed_ms(started),
            )
            raise
        else:
            log = logger.debug if path.startswith(QUIET_PATHS) else logger.info
            log(
                "Request completed",
                status_code=response.status_code,
                duration_ms=_elapsed_ms(started),
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_context()


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
