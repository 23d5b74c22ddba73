"""
Health check endpoint for the REST API.
"""

from fastapi import APIRouter


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe. Does not touch the database."""
    return {"status": "ok"}
