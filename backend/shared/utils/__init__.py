"""
Utilities module: exceptions, text and working-time helpers.
"""

from shared.utils.exceptions import (
    NotFoundError,
    ValidationError,
    ConflictError,
)
from shared.utils.text import slugify

__all__ = [
    # exceptions
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    # text
    "slugify",
]
