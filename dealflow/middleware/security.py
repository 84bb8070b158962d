"""Security headers for the debug HTTP server.

The debug server only serves JSON plus the Swagger page, so the header set
is small and fixed.  ``SECURITY_HEADERS`` is applied to every response when
``settings.enable_security_headers`` is on; the request id is always added.
"""

from __future__ import annotations

import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from dealflow.config import settings

# Swagger UI pulls its bundle from jsdelivr.
_DOCS_CSP = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "img-src 'self' data: https://fastapi.tiangolo.com; "
    "frame-ancestors 'none'"
)
_API_CSP = "default-src 'none'; frame-ancestors 'none'"

_DOCS_PATHS = ("/docs", "/openapi.json")

SECURITY_HEADERS = {
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cache-Control": "no-store",
    "Content-Security-Policy": _API_CSP,
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp ``SECURITY_HEADERS`` and an ``X-Request-ID`` on every response.

    Usage:
        app.add_middleware(SecurityHeadersMiddleware)
    """

    def __init__(self, app: Callable, enabled: bool | None = None):
        super().__init__(app)
        self.enabled = settings.enable_security_headers if enabled is None else enabled

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        if not self.enabled:
            return response

        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        if request.url.path.startswith(_DOCS_PATHS):
            response.headers["Content-Security-Policy"] = _DOCS_CSP
        return response


def parse_cors_origins(origins_string: str) -> list[str]:
    """Split a comma-separated origin list; ``"*"`` stays a wildcard.

    >>> parse_cors_origins("http://localhost:3000, http://localhost:5173")
    ['http://localhost:3000', 'http://localhost:5173']
    """
    if origins_string.strip() == "*":
        return ["*"]
    return [origin.strip() for origin in origins_string.split(",") if origin.strip()]
