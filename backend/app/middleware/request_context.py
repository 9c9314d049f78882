"""
Blog Backend — Request Context Middleware
===========================================

What:  Gives every request a correlation ID and writes one access-log line
       per request.
How:   A client-supplied X-Request-ID is kept only if it is a short token of
       URL-safe characters; anything else is replaced by a generated 8-char
       ID, so headers and log lines never carry arbitrary client text. The ID
       lives in a ContextVar for the duration of the request, where
       `RequestIDLogFilter` stamps it onto every log record and the exception
       handlers copy it into error bodies.

Access log (logger "blog.access"):
    PUT /users/1 200 3.2ms from 127.0.0.1
    Level follows the status class: 5xx → ERROR, 4xx → WARNING, else INFO.
    /health is not logged. Request bodies are never logged (they carry emails).
"""

import logging
import re
import time
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
UNLOGGED_PATHS = frozenset({"/health"})

_ACCEPTED_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")

# Coroutine-local: concurrent requests on the same event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

access_logger = logging.getLogger("blog.access")


def resolve_request_id(incoming: Optional[str]) -> str:
    """Keep a well-formed client ID, otherwise mint a fresh one."""
    if incoming and _ACCEPTED_REQUEST_ID.fullmatch(incoming):
        return incoming
    return uuid.uuid4().hex[:8]


class RequestIDLogFilter(logging.Filter):
    """Adds `request_id` to every record ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("") or "-"
        return True


class RequestContextMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        # Not reset afterwards: the outermost 500 handler still reads it
        request_id_var.set(rid)
        request.state.request_id = rid
        start_time = time.perf_counter()

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid

        if request.url.path not in UNLOGGED_PATHS:
            self._log_access(request, response.status_code, start_time)
        return response

    @staticmethod
    def _log_access(request: Request, status: int, start_time: float) -> None:
        duration_ms = (time.perf_counter() - start_time) * 1000
        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        access_logger.log(
            level,
            "%s %s %d %.1fms from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            request.client.host if request.client else "unknown",
        )
