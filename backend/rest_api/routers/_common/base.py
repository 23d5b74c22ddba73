"""
Dependencies shared by the authenticated routers.

Resolution chain for every admin request:
    session cookie -> user -> the establishment that user owns
"""

from typing import Any

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from shared.config.settings import Settings
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context
from shared.utils.exceptions import AuthenticationError, NotFoundError
from rest_api.models import Establishment, User
from rest_api.services.domain import EstablishmentService


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings


def current_user(
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> User:
    """
    Load the user behind the session cookie.

    Raises:
        AuthenticationError: If the session refers to a user that no longer exists.
    """
    user = db.get(User, ctx["user_id"])
    if not user:
        raise AuthenticationError(user_id=ctx["user_id"])
    return user


def current_establishment(
    user: User = Depends(current_user),
    db: Session = Depends(get_db),
) -> Establishment:
    """
    Resolve the establishment owned by the current user.

    Every tenant-scoped query below this dependency filters by its id.
    """
    establishment = EstablishmentService(db).get_for_user(user.id)
    if not establishment:
        raise NotFoundError("Establishment", user_id=user.id)
    return establishment
