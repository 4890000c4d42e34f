from __future__ import annotations

import math
import time
from typing import TYPE_CHECKING

from fastapi import Depends, Request

from cloudbook.core.errors import AppError, RateLimitedError, UnauthenticatedError, UnexpectedError
from cloudbook.core.services.note_service import NoteService
from cloudbook.utils.logging import get_logger

if TYPE_CHECKING:
    from cloudbook.config import Settings
    from cloudbook.core.repositories.note_repository import NoteRepository
    from cloudbook.core.repositories.user_repository import UserRepository
    from cloudbook.core.services.credential_service import CredentialStore
    from cloudbook.core.services.identity_service import IdentityResolver

logger = get_logger(__name__)


class LoginRateLimiter:
    """In-memory sliding window of attempts per (operation, client ip)."""

    def __init__(self, settings: Settings):
        self.enabled = settings.enable_rate_limiting
        self.limit = settings.max_login_attempts
        self.window_seconds = settings.login_attempt_window
        self._attempts: dict[str, list[float]] = {}

    def tracked_count(self) -> int:
        """Number of identifiers currently holding attempts."""
        return len(self._attempts)

    def _evict_expired(self, now: float) -> None:
        """Forget identifiers whose every attempt is outside the window."""
        window_start = now - self.window_seconds
        stale = [key for key, attempts in self._attempts.items() if not attempts or attempts[-1] <= window_start]
        for key in stale:
            del self._attempts[key]

    def _recent(self, identifier: str, now: float) -> list[float]:
        window_start = now - self.window_seconds
        attempts = [ts for ts in self._attempts.get(identifier, []) if ts > window_start]
        self._attempts[identifier] = attempts
        return attempts

    def hit(self, identifier: str, now: float | None = None) -> None:
        """Record an attempt, raising RateLimitedError once the window is full."""
        if not self.enabled:
            return
        now = now if now is not None else time.time()
        self._evict_expired(now)
        attempts = self._recent(identifier, now)
        if len(attempts) >= self.limit:
            earliest_attempt = min(attempts)
            seconds_until_reset = max(1, math.ceil(self.window_seconds - (now - earliest_attempt)))
            raise RateLimitedError(
                f"Too many {identifier.split(':', 1)[0]} attempts. Please try again later.",
                headers={
                    "Retry-After": str(seconds_until_reset),
                    "RateLimit-Limit": str(self.limit),
                    "RateLimit-Remaining": "0",
                    "RateLimit-Reset": str(seconds_until_reset),
                },
            )
        attempts.append(now)


def rate_limit_by_ip(request: Request, operation: str = "default") -> None:
    """Rate limiting helper used by the auth endpoints.

    Args:
        request: FastAPI request object
        operation: Operation identifier for rate limiting (e.g., "login", "signup")

    Raises:
        RateLimitedError: If rate limit is exceeded
    """
    client_ip = request.client.host if request.client else "unknown"
    limiter: LoginRateLimiter = request.app.state.rate_limiter
    try:
        limiter.hit(f"{operation}:{client_ip}")
    except RateLimitedError:
        logger.warning(f"Rate limited {operation} attempt", extra={"ip": client_ip})
        raise


def get_settings_from_state(request: Request) -> Settings:
    return request.app.state.settings


def get_user_repository(request: Request) -> UserRepository:
    return request.app.state.user_repository


def get_note_repository(request: Request) -> NoteRepository:
    return request.app.state.note_repository


def get_credential_store(request: Request) -> CredentialStore:
    return request.app.state.credential_store


def get_identity_resolver(request: Request) -> IdentityResolver:
    return request.app.state.identity_resolver


def get_note_service(repo: NoteRepository = Depends(get_note_repository)) -> NoteService:
    """Get a request-scoped note service instance."""
    return NoteService(repo)


async def get_optional_user_id(
    request: Request,
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> int | None:
    """Resolve the caller to a local user id, or None when unauthenticated."""
    try:
        return await resolver.resolve(request)
    except AppError:
        raise
    except Exception as err:
        logger.error("Identity resolution failed", extra={"error": str(err)})
        raise UnexpectedError(detail=str(err)) from err


async def get_current_user_id(user_id: int | None = Depends(get_optional_user_id)) -> int:
    if user_id is None:
        raise UnauthenticatedError()
    return user_id
