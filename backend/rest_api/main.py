"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import FastAPI

from shared.config.settings import Settings, get_settings
from shared.security.auth import SessionTokenCodec
from shared.security.rate_limit import limiter
from rest_api.core.cors import configure_cors
from rest_api.core.errors import register_exception_handlers
from rest_api.core.lifespan import lifespan
from rest_api.core.middlewares import register_middlewares
from rest_api.routers.admin import router as admin_router
from rest_api.routers.auth import router as auth_router
from rest_api.routers.public import health_router, menu_router, orders_router


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application for one configuration.

    The session codec is created here from ``settings`` and shared through
    ``app.state``, so tests can run several apps with different secrets.
    The slowapi limiter is module-wide; its on/off switch follows the
    ``settings`` of the most recently built app.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Resto POS REST API",
        description="Restaurant point of sale: catalog, tables, orders and stock",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session_codec = SessionTokenCodec(settings)
    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter

    register_exception_handlers(app)
    register_middlewares(app, settings)
    configure_cors(app, settings)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(menu_router)
    app.include_router(orders_router)
    app.include_router(admin_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rest_api.main:app",
        host="0.0.0.0",
        port=get_settings().rest_api_port,
        reload=True,
    )
