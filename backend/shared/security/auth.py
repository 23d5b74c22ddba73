"""
Session authentication.

The session is an HS256 JWT carried in an HttpOnly cookie. Signing and
verification go through a SessionTokenCodec built from an explicit Settings
object at application startup and stored on ``app.state``; request handlers
receive it through the ``get_session_codec`` dependency.
"""

from __future__ import annotations

import time
import uuid
from typing import Any

import jwt
from fastapi import Depends, Request, Response

from shared.config.logging import get_logger
from shared.config.settings import Settings
from shared.utils.exceptions import AuthenticationError

logger = get_logger(__name__)

ALGORITHM = "HS256"


class SessionTokenCodec:
    """Signs, verifies and transports session tokens for one configuration."""

    def __init__(self, settings: Settings):
        self._secret = settings.jwt_secret
        self._issuer = settings.jwt_issuer
        self._audience = settings.jwt_audience
        self.ttl_seconds = settings.session_ttl_seconds
        self.cookie_name = settings.session_cookie_name
        self._cookie_secure = settings.cookie_secure
        self._cookie_samesite = settings.cookie_samesite
        self._cookie_domain = settings.cookie_domain or None

    def sign(self, user_id: int, email: str) -> str:
        """Sign a session token for a user."""
        now = int(time.time())
        data = {
            "sub": str(user_id),
            "email": email,
            "iss": self._issuer,
            "aud": self._audience,
            "iat": now,
            "exp": now + self.ttl_seconds,
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(data, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> dict[str, Any]:
        """
        Verify and decode a session token.

        Raises:
            AuthenticationError: If the token is invalid, expired or lacks a subject.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                audience=self._audience,
                issuer=self._issuer,
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Session expired")
        except jwt.InvalidTokenError as e:
            raise AuthenticationError("Invalid session", reason=str(e))

        if "sub" not in payload:
            raise AuthenticationError("Invalid session: missing subject claim")

        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise AuthenticationError("Invalid session: malformed subject claim")

        return {
            "user_id": user_id,
            "email": payload.get("email"),
            "jti": payload.get("jti"),
        }

    def set_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            httponly=True,
            secure=self._cookie_secure,
            samesite=self._cookie_samesite,
            max_age=self.ttl_seconds,
            path="/",
            domain=self._cookie_domain,
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            domain=self._cookie_domain,
            httponly=True,
            secure=self._cookie_secure,
            samesite=self._cookie_samesite,
        )


def get_session_codec(request: Request) -> SessionTokenCodec:
    """FastAPI dependency returning the codec configured at startup."""
    return request.app.state.session_codec


def current_user_context(
    request: Request,
    codec: SessionTokenCodec = Depends(get_session_codec),
) -> dict[str, Any]:
    """
    Decode the session cookie of the current request.

    Returns:
        Dict with ``user_id``, ``email`` and ``jti``.

    Raises:
        AuthenticationError: If the cookie is missing or invalid.
    """
    token = request.cookies.get(codec.cookie_name)
    if not token:
        raise AuthenticationError()
    return codec.verify(token)
