"""
Authentication routers - /api/auth/*
Handles registration, login, logout and the current session.
"""

from .routes import router

__all__ = ["router"]
