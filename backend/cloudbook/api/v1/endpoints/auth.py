from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Request, Response, status

from cloudbook.api.v1.schemas.auth import SignInRequest, SignUpRequest, UserEnvelope, UserPublic
from cloudbook.api.v1.schemas.note import DeletedResponse
from cloudbook.core.errors import AppError, UnexpectedError
from cloudbook.dependencies import (
    get_credential_store,
    get_optional_user_id,
    get_settings_from_state,
    get_user_repository,
    rate_limit_by_ip,
)
from cloudbook.utils.logging import get_logger

if TYPE_CHECKING:
    from cloudbook.config import Settings
    from cloudbook.core.models.user import User
    from cloudbook.core.repositories.user_repository import UserRepository
    from cloudbook.core.services.credential_service import CredentialStore

logger = get_logger(__name__)

router = APIRouter(
    responses={
        400: {"description": "Invalid request"},
        401: {"description": "Unauthorized"},
        429: {"description": "Too many requests"}
    }
)


def _set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def _public(user: User) -> UserPublic:
    return UserPublic(id=user.id, name=user.name, email=user.email)


@router.post("/signup", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def sign_up(
    request: Request,
    response: Response,
    payload: SignUpRequest,
    credentials: CredentialStore = Depends(get_credential_store),
    settings: Settings = Depends(get_settings_from_state),
):
    """Create a password account and start a session."""
    rate_limit_by_ip(request, "signup")
    try:
        user = await credentials.register(payload.name, payload.email, payload.password)
    except AppError:
        raise
    except Exception as err:
        logger.error("Unexpected error during signup", extra={"error": str(err)})
        raise UnexpectedError("Signup failed", detail=str(err)) from err

    _set_session_cookie(response, credentials.issue_token(user), settings)
    return UserEnvelope(user=_public(user))


@router.post("/login", response_model=UserEnvelope)
async def log_in(
    request: Request,
    response: Response,
    payload: SignInRequest,
    credentials: CredentialStore = Depends(get_credential_store),
    settings: Settings = Depends(get_settings_from_state),
):
    """Sign in with email and password."""
    rate_limit_by_ip(request, "login")
    try:
        user = await credentials.verify(payload.email, payload.password)
    except AppError:
        raise
    except Exception as err:
        logger.error("Unexpected error during login", extra={"error": str(err)})
        raise UnexpectedError("Login failed", detail=str(err)) from err

    _set_session_cookie(response, credentials.issue_token(user), settings)
    return UserEnvelope(user=_public(user))


@router.post("/logout", response_model=DeletedResponse)
async def log_out(
    response: Response,
    settings: Settings = Depends(get_settings_from_state),
):
    """Drop the session cookie. Issued tokens stay valid until they expire."""
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    return DeletedResponse()


@router.get("/me", response_model=UserEnvelope)
async def me(
    user_id: int | None = Depends(get_optional_user_id),
    users: UserRepository = Depends(get_user_repository),
):
    """Return the signed-in user, or null."""
    if user_id is None:
        return UserEnvelope(user=None)
    try:
        user = await users.get_by_id(user_id)
    except Exception as err:
        logger.error("Unexpected error loading current user", extra={"error": str(err)})
        raise UnexpectedError(detail=str(err)) from err
    return UserEnvelope(user=_public(user) if user else None)
