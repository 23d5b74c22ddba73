"""
Security module: session tokens, password hashing, rate limiting.
"""

from shared.security.auth import (
    SessionTokenCodec,
    get_session_codec,
    current_user_context,
)
from shared.security.password import hash_password, verify_password
from shared.security.rate_limit import (
    limiter,
    rate_limit_exceeded_handler,
)

__all__ = [
    # auth
    "SessionTokenCodec",
    "get_session_codec",
    "current_user_context",
    # password
    "hash_password",
    "verify_password",
    # rate_limit
    "limiter",
    "rate_limit_exceeded_handler",
]
