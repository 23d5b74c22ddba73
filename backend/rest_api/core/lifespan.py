"""
Application lifespan: logging setup, configuration checks, schema creation.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared.config.logging import setup_logging, rest_api_logger as logger
from shared.config.settings import DEFAULT_JWT_SECRET, Settings
from shared.infrastructure.db import engine
from rest_api.models import Base


def check_production_secrets(settings: Settings) -> None:
    """Refuse to start a production server with an unsafe configuration."""
    problems = settings.validate_production_secrets()
    if not problems:
        return

    for problem in problems:
        logger.error("Configuration error", problem=problem)
    raise RuntimeError(f"Refusing to start with unsafe production configuration: {'; '.join(problems)}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    setup_logging(settings)
    check_production_secrets(settings)
    if settings.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning("Using the default JWT secret, sessions can be forged")

    logger.info("Starting REST API", port=settings.rest_api_port, env=settings.environment)
    Base.metadata.create_all(bind=engine)

    yield

    logger.info("Shutting down REST API")
    engine.dispose()
