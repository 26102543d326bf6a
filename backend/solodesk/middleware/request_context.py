"""
Request context middleware.

WHAT: Assigns every request an ID, makes it available to logging code and
logs one line per request with status and duration.

WHY: Template saves and uploads fan out into several API calls from one
editor action; a shared X-Request-ID lets those calls be followed through
the logs.

HOW: An incoming X-Request-ID header is reused, otherwise a UUID4 is
generated. The context is stored on request.state and in a ContextVar so
services can read it without the request object.
"""

import logging
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass(frozen=True)
class RequestContext:
    """
    Request-scoped context.

    Fields:
    - request_id: Correlation ID (from the client or generated)
    - ip_address: Client IP, honoring X-Forwarded-For
    - user_agent: Client's User-Agent header
    - path/method: Request line
    """

    request_id: str
    ip_address: str
    user_agent: Optional[str]
    path: str
    method: str


_request_context: ContextVar[Optional[RequestContext]] = ContextVar(
    "request_context", default=None
)


def get_request_context() -> Optional[RequestContext]:
    """Context of the request being handled, None outside a request."""
    return _request_context.get()


def get_client_ip(request: Request) -> str:
    """
    Client IP address.

    Checks X-Real-IP, then the first entry of X-Forwarded-For, then the
    socket peer. Proxy headers are only trustworthy behind a proxy that
    overwrites them.
    """
    x_real_ip = request.headers.get("X-Real-IP")
    if x_real_ip:
        return x_real_ip.strip()

    x_forwarded_for = request.headers.get("X-Forwarded-For")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that captures request context and logs each request.

    Example:
        ctx = get_request_context()
        logger.info("Saving template (request %s)", ctx.request_id)
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        context = RequestContext(
            request_id=request_id,
            ip_address=get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
            path=request.url.path,
            method=request.method,
        )
        request.state.context = context
        token = _request_context.set(context)

        started = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id

            logger.info(
                "%s %s -> %d (%.1f ms) [%s]",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
                request_id,
            )
            return response
        finally:
            _request_context.reset(token)
