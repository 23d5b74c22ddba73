"""
Authentication router.
Handles registration, login, logout and the current session.

The session token travels only in an HttpOnly cookie; it is never part of
a response body.
"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from shared.config.logging import auth_logger as logger, mask_email
from shared.infrastructure.db import get_db, safe_commit
from shared.security.auth import SessionTokenCodec, get_session_codec
from shared.security.password import hash_password, verify_password
from shared.security.rate_limit import LOGIN_RATE_LIMIT, limiter
from shared.utils.exceptions import AuthenticationError, ConflictError
from shared.utils.schemas import LoginRequest, RegisterRequest, SessionOutput, UserOutput
from rest_api.models import User
from rest_api.routers._common import current_user
from rest_api.services.domain import EstablishmentService


router = APIRouter(prefix="/api/auth", tags=["auth"])


def _normalize_email(email: str) -> str:
    return email.strip().lower()


@router.post("/register", response_model=UserOutput, status_code=status.HTTP_201_CREATED)
@limiter.limit(LOGIN_RATE_LIMIT)
def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    db: Session = Depends(get_db),
    codec: SessionTokenCodec = Depends(get_session_codec),
) -> UserOutput:
    """Create an account and open a session for it."""
    email = _normalize_email(body.email)
    if db.scalar(select(User.id).where(User.email == email)) is not None:
        raise ConflictError("An account with this email already exists", email=mask_email(email))

    user = User(email=email, password=hash_password(body.password))
    db.add(user)
    safe_commit(db)
    db.refresh(user)

    codec.set_cookie(response, codec.sign(user.id, user.email))
    logger.info("User registered", user_id=user.id, email=mask_email(user.email))
    return UserOutput.model_validate(user)


@router.post("/login", response_model=UserOutput)
@limiter.limit(LOGIN_RATE_LIMIT)
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: Session = Depends(get_db),
    codec: SessionTokenCodec = Depends(get_session_codec),
) -> UserOutput:
    """
    Authenticate with email and password.

    Unknown email and wrong password produce the same 401 so the endpoint
    does not reveal which accounts exist.
    """
    email = _normalize_email(body.email)
    user = db.scalar(select(User).where(User.email == email))

    if not user:
        logger.warning("LOGIN_FAILED: User not found", email=mask_email(email))
        raise AuthenticationError("Invalid email or password")

    if not verify_password(body.password, user.password):
        logger.warning("LOGIN_FAILED: Invalid password", email=mask_email(email), user_id=user.id)
        raise AuthenticationError("Invalid email or password")

    codec.set_cookie(response, codec.sign(user.id, user.email))
    logger.info("LOGIN_SUCCESS", user_id=user.id, email=mask_email(user.email))
    return UserOutput.model_validate(user)


@router.post("/logout")
def logout(
    response: Response,
    codec: SessionTokenCodec = Depends(get_session_codec),
) -> dict:
    """Clear the session cookie. Succeeds whether or not a session exists."""
    codec.clear_cookie(response)
    return {"success": True}


@router.get("/session", response_model=SessionOutput)
def session(
    user: User = Depends(current_user),
    db: Session = Depends(get_db),
) -> SessionOutput:
    """Current user and the id of the establishment they own, if any."""
    establishment = EstablishmentService(db).get_for_user(user.id)
    return SessionOutput(
        user=UserOutput.model_validate(user),
        establishment_id=establishment.id if establishment else None,
    )
