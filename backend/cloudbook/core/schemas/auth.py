from __future__ import annotations

from pydantic import Field

from cloudbook.core.models.base import AppBaseModel


class SessionClaims(AppBaseModel):
    """Claims carried by a validated session token."""

    uid: int
    email: str
    iat: int
    exp: int


class ExternalIdentity(AppBaseModel):
    """Principal authenticated by a third-party provider (Supabase Auth)."""

    subject: str
    email: str | None = None
    name: str | None = Field(default=None, description="Display name reported by the provider")
