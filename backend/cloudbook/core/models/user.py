from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .base import AppBaseModel, utcnow


class User(AppBaseModel):
    """Local user record. Externally authenticated users carry a placeholder hash."""

    id: int
    name: str
    email: str
    password_hash: str = Field(repr=False)
    created_at: datetime = Field(default_factory=utcnow)
