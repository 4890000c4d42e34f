from __future__ import annotations

import secrets
from typing import TYPE_CHECKING

from cloudbook.core.errors import ConflictError, InvalidCredentialsError, ValidationError
from cloudbook.core.schemas.auth import SessionClaims
from cloudbook.core.security import (
    PLACEHOLDER_PASSWORD_HASH,
    decode_token,
    hash_password,
    sign_token,
    verify_password,
)
from cloudbook.utils.logging import get_logger
from cloudbook.utils.validation import normalize_email, validate_password_strength

if TYPE_CHECKING:
    from cloudbook.config import Settings
    from cloudbook.core.models.user import User
    from cloudbook.core.repositories.user_repository import UserRepository


logger = get_logger(__name__)


class CredentialStore:
    """Password accounts and signed session tokens.

    The signing key and token lifetime come from the ``Settings`` handed in at
    construction; nothing is read from the environment here.
    """

    def __init__(self, users: UserRepository, settings: Settings):
        self._users = users
        self._secret = settings.session_secret
        self._ttl_seconds = settings.session_ttl_seconds
        self._iterations = settings.password_hash_iterations
        # unknown emails are checked against this so they cost one full hash too
        self._dummy_hash = hash_password(secrets.token_urlsafe(16), iterations=self._iterations)

    async def register(self, name: str, email: str, password: str) -> User:
        """Create a password account. Emails compare case-insensitively."""
        name = (name or "").strip()
        email = normalize_email(email)
        if not name or not email or not password:
            raise ValidationError("Missing required fields")

        is_valid_password, password_error = validate_password_strength(password)
        if not is_valid_password:
            raise ValidationError(password_error)

        if await self._users.get_by_email(email) is not None:
            raise ConflictError("Email already in use")

        user = await self._users.create(
            name=name,
            email=email,
            password_hash=hash_password(password, iterations=self._iterations),
        )
        logger.info("User signed up successfully", extra={"email": user.email, "user_id": user.id})
        return user

    async def verify(self, email: str, password: str) -> User:
        """Return the user for a matching email/password pair.

        Unknown email and wrong password raise the same error.
        """
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("Missing credentials")

        user = await self._users.get_by_email(email)
        has_password = user is not None and user.password_hash != PLACEHOLDER_PASSWORD_HASH
        matched = verify_password(password, user.password_hash if has_password else self._dummy_hash)
        if not (has_password and matched):
            logger.warning("Sign in failed", extra={"email": email})
            raise InvalidCredentialsError()

        logger.info("User signed in successfully", extra={"email": user.email, "user_id": user.id})
        return user

    def issue_token(self, user: User) -> str:
        return sign_token({"uid": user.id, "email": user.email}, secret=self._secret, ttl_seconds=self._ttl_seconds)

    def validate_token(self, token: str | None) -> SessionClaims | None:
        if not token:
            return None
        payload = decode_token(token, secret=self._secret)
        if payload is None:
            return None
        try:
            return SessionClaims.model_validate(payload)
        except ValueError:
            return None
