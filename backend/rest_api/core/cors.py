"""
CORS for the admin dashboard and the public menu front-ends.

The session travels in a cookie, so credentials are allowed and origins
are always an explicit list, never ``*``.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config.settings import Settings
from shared.infrastructure.correlation import REQUEST_ID_HEADER

# Local front-end dev servers, used when ALLOWED_ORIGINS is empty
DEFAULT_CORS_ORIGINS = [
    f"http://{host}:{port}"
    for host in ("localhost", "127.0.0.1")
    for port in (3000, 5173)
]


def get_cors_origins(settings: Settings) -> list[str]:
    origins = [origin.strip() for origin in settings.allowed_origins.split(",")]
    return [origin for origin in origins if origin] or DEFAULT_CORS_ORIGINS


def configure_cors(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(settings),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Accept-Language", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        # Preflights are not cached while developing
        max_age=0 if settings.environment == "development" else 600,
    )
