"""
Middleware package.

WHY: Middleware provides cross-cutting concerns (request IDs and logging,
security headers) that apply to all requests.
"""

from solodesk.middleware.security_headers import SecurityHeadersMiddleware
from solodesk.middleware.request_context import (
    RequestContextMiddleware,
    get_request_context,
    get_client_ip,
    RequestContext,
)

__all__ = [
    "SecurityHeadersMiddleware",
    "RequestContextMiddleware",
    "get_request_context",
    "get_client_ip",
    "RequestContext",
]
