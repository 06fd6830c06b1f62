from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Any, Callable, Dict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"

_PUZZLE_PATH = re.compile(r"^/api/puzzles/(?P<puzzle_id>[^/]+)(?:/(?P<action>[^/]+))?/?$")


def puzzle_context(path: str) -> Dict[str, str]:
    """Puzzle id and action named by a session route, empty for other paths.

    ``/api/puzzles/generate`` is a collection route, not a session.
    """
    m = _PUZZLE_PATH.match(path)
    if m is None or m.group("puzzle_id") == "generate":
        return {}
    ctx = {"puzzle_id": m.group("puzzle_id")}
    if m.group("action"):
        ctx["action"] = m.group("action")
    return ctx


class RequestIDLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and log timing plus the puzzle it touches.

    The caller's ``x-request-id`` is reused when sent. Session routes add
    ``puzzle_id`` and ``action`` to both log records.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        path = request.url.path
        context = puzzle_context(path)

        extra: Dict[str, Any] = {"request_id": request_id, "method": request.method, "path": path}
        logger.info("request", extra={**extra, **context})

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        extra = {
            "request_id": request_id,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": int((time.perf_counter() - start) * 1000),
        }
        logger.info("response", extra={**extra, **context})
        return response
