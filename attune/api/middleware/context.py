"""Logging context middleware.

Binds participant_id and trace_id to structlog contextvars for the
duration of each request and counts requests by route and status.
"""

from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from structlog.contextvars import bind_contextvars, clear_contextvars

from attune.observability.logging import get_logger
from attune.observability.metrics import REQUEST_COUNT

logger = get_logger(__name__)


class LoggingContextMiddleware(BaseHTTPMiddleware):
    """Middleware that binds request context to structlog contextvars.

    Headers:
        X-Participant-ID: Calling participant
        X-Trace-ID: Distributed trace identifier
        traceparent: W3C trace context (fallback for trace_id)
    """

    async def dispatch(  # type: ignore[override]
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        """Process request and bind logging context."""
        clear_contextvars()

        trace_id = request.headers.get("X-Trace-ID") or self._extract_trace_id(
            request.headers.get("traceparent")
        )
        bind_contextvars(
            participant_id=request.headers.get("X-Participant-ID"),
            trace_id=trace_id,
        )

        logger.debug("request_started", method=request.method, path=request.url.path)

        response = await call_next(request)  # type: ignore[misc]

        route = request.scope.get("route")
        endpoint = getattr(route, "path", "unmatched")
        REQUEST_COUNT.labels(endpoint=endpoint, status=str(response.status_code)).inc()

        logger.info(
            "request_completed",
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        )

        return response  # type: ignore[no-any-return]

    @staticmethod
    def _extract_trace_id(traceparent: str | None) -> str | None:
        """Extract trace_id from a W3C traceparent header.

        Format: version-trace_id-parent_id-trace_flags
        """
        if not traceparent:
            return None
        parts = traceparent.split("-")
        return parts[1] if len(parts) >= 2 else None
