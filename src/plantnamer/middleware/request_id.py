"""X-Request-ID propagation for tracing a request through the logs."""

import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

REQUEST_ID_HEADER = "X-Request-ID"

ErrorHandler = Callable[[Request, Exception], Awaitable[Response]]


def is_valid_uuid(value: str | None) -> bool:
    """Return True if ``value`` parses as a UUID (with or without dashes)."""
    if not value:
        return False
    try:
        uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return False
    return True


def resolve_request_id(incoming: str | None) -> str:
    """Keep a caller-supplied UUID, otherwise mint a fresh uuid4."""
    if is_valid_uuid(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Stores the request ID in ``request.state`` and echoes it on the response.

    Unhandled exceptions from inside the app surface here before Starlette's
    server-error layer sees them. When ``error_handler`` is given, it renders
    them so that error responses carry the header too; otherwise they propagate.
    """

    def __init__(self, app: ASGIApp, error_handler: ErrorHandler | None = None):
        super().__init__(app)
        self.error_handler = error_handler

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception as e:
            if self.error_handler is None:
                raise
            response = await self.error_handler(request, e)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
