"""
HTTP middlewares: response hardening headers and JSON-only request bodies.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from shared.config.settings import Settings
from shared.infrastructure.correlation import CorrelationIdMiddleware

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    # Responses are JSON, never rendered as documents
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}
HSTS_VALUE = "max-age=31536000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds SECURITY_HEADERS to every response, plus HSTS when enabled."""

    def __init__(self, app, hsts: bool = False):
        super().__init__(app)
        self._headers = dict(SECURITY_HEADERS)
        if hsts:
            self._headers["Strict-Transport-Security"] = HSTS_VALUE

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.update(self._headers)
        return response


class ContentTypeValidationMiddleware(BaseHTTPMiddleware):
    """
    Rejects POST/PUT/PATCH bodies that are declared as anything but JSON
    with 415. Requests without a Content-Type header pass through.
    """

    METHODS_WITH_BODY = frozenset({"POST", "PUT", "PATCH"})

    async def dispatch(self, request: Request, call_next):
        content_type = request.headers.get("content-type", "")
        if (
            request.method in self.METHODS_WITH_BODY
            and content_type
            and not content_type.startswith("application/json")
        ):
            return JSONResponse(
                status_code=415,
                content={"error": "Unsupported Media Type. Use application/json"},
            )
        return await call_next(request)


def register_middlewares(app: FastAPI, settings: Settings) -> None:
    # Last added runs first: the correlation ID is set before anything logs
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.environment == "production")
    app.add_middleware(ContentTypeValidationMiddleware)
    app.add_middleware(CorrelationIdMiddleware)
