"""Request context middleware.

Assigns a request ID (or adopts ``X-Request-ID``), picks up tracing headers,
logs each request once it finishes, and clears the context afterwards.
"""

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from commentable.core.context import clear_context, set_request_id, set_tracing


logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def trace_id_from_headers(request: Request) -> str | None:
    """``X-Trace-ID`` or the trace id segment of a W3C ``traceparent``."""
    if trace_id := request.headers.get("X-Trace-ID"):
        return trace_id
    parts = request.headers.get("traceparent", "").split("-")
    return parts[1] if len(parts) >= 2 and parts[1] else None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request identifiers to the logging context for each request."""

    def __init__(
        self,
        app: ASGIApp,
        log_requests: bool = True,
        exclude_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.log_requests = log_requests
        self.exclude_paths = tuple(exclude_paths or ["/health"])

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        started = time.perf_counter()
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        set_tracing(trace_id_from_headers(request), request.headers.get("X-Correlation-ID"))

        try:
            response = await call_next(request)
            if self.log_requests and not request.url.path.startswith(self.exclude_paths):
                log = logger.warning if response.status_code >= 400 else logger.info
                log(
                    "request_completed",
                    method=request.method,
                    path=request.url.path,
                    query=str(request.query_params) or None,
                    status_code=response.status_code,
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                )
        except Exception as e:
            logger.exception(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise
        finally:
            clear_context()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
