from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, EmailStr, Field, StringConstraints

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class SignInRequest(BaseModel):
    """Request to sign in with email and password."""

    email: NonBlankStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")


class SignUpRequest(BaseModel):
    """Request to sign up with name, email and password."""

    name: NonBlankStr = Field(..., max_length=255, description="Display name")
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")


class UserPublic(BaseModel):
    """User fields safe to return to clients."""

    id: int
    name: str
    email: str


class UserEnvelope(BaseModel):
    user: UserPublic | None = Field(..., description="Signed-in user, or null")
