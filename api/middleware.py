"""Request context middleware using structlog contextvars.

Reads the X-Request-ID header (or generates one) and binds it into
structlog's context, so every log line emitted while handling the request
carries `request_id` without explicit parameter passing. The id is echoed
back on the response.
"""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"


def get_request_id() -> str | None:
    """Return the request id bound for the current request, if any."""
    return structlog.contextvars.get_contextvars().get("request_id")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request_id, method and path for the lifetime of one request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            structlog.contextvars.clear_contextvars()
