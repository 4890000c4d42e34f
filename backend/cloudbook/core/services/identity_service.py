from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from cloudbook.core.schemas.auth import ExternalIdentity
from cloudbook.utils.logging import get_logger
from cloudbook.utils.validation import normalize_email

if TYPE_CHECKING:
    from fastapi import Request

    from cloudbook.core.models.user import User
    from cloudbook.core.repositories.user_repository import UserRepository
    from cloudbook.core.services.credential_service import CredentialStore


logger = get_logger(__name__)


def bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        token = auth_header.split(" ", 1)[1].strip()
        return token or None
    return None


class ExternalIdentityProvider(ABC):
    """Source of third-party authenticated principals."""

    @abstractmethod
    async def identify(self, request: Request) -> ExternalIdentity | None:  # pragma: no cover - interface only
        """Return the request's external identity, or None when there is none."""


class SupabaseIdentityProvider(ExternalIdentityProvider):
    """Validates `Authorization: Bearer <jwt>` headers through Supabase Auth."""

    def __init__(self, supabase_client: Any):
        self.supabase = supabase_client

    async def identify(self, request: Request) -> ExternalIdentity | None:
        jwt = bearer_token(request)
        if not jwt or len(jwt.split(".")) != 3:
            return None
        try:
            resp = await asyncio.to_thread(lambda: self.supabase.auth.get_user(jwt))
        except Exception as err:
            error_msg = str(err).lower()
            logger.warning(
                "External token validation failed",
                extra={
                    "error_type": type(err).__name__,
                    "error_summary": error_msg[:100] if error_msg else "Unknown error",
                    "jwt_length": len(jwt),
                }
            )
            return None

        user = getattr(resp, "user", None)
        user_id = getattr(user, "id", None)
        if not user or not user_id:
            return None
        metadata = getattr(user, "user_metadata", None) or {}
        return ExternalIdentity(
            subject=str(user_id),
            email=getattr(user, "email", None),
            name=metadata.get("full_name") or metadata.get("name"),
        )


class IdentityResolver:
    """Maps a request to a local user id.

    External identities win over the session cookie; an external identity seen
    for the first time gets a local user row through an idempotent upsert.
    """

    def __init__(
        self,
        users: UserRepository,
        credentials: CredentialStore,
        *,
        provider: ExternalIdentityProvider | None = None,
        cookie_name: str = "session",
    ):
        self._users = users
        self._credentials = credentials
        self._provider = provider
        self._cookie_name = cookie_name

    async def resolve(self, request: Request) -> int | None:
        if self._provider is not None:
            identity = await self._provider.identify(request)
            email = normalize_email(identity.email) if identity and identity.email else ""
            if email:
                user = await self.ensure_local_user(identity.name or "", email)
                return user.id

        claims = self._credentials.validate_token(request.cookies.get(self._cookie_name))
        return claims.uid if claims else None

    async def ensure_local_user(self, name: str, email: str) -> User:
        """Look up or create the local row for an external identity."""
        display_name = name.strip() or email.split("@")[0] or "User"
        return await self._users.ensure_by_email(name=display_name, email=normalize_email(email))
