"""
Common dependencies shared across routers.
"""

from .base import current_establishment, current_user, get_app_settings

__all__ = [
    "current_establishment",
    "current_user",
    "get_app_settings",
]
