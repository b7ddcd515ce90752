"""Pydantic schemas for User."""
from datetime import datetime
from uuid import UUID

from vidtube.schemas.common import CamelModel


class UserResponse(CamelModel):
    """Sanitized user: never carries the password hash or refresh token."""

    id: UUID
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserPublic(CamelModel):
    id: UUID
    full_name: str
    username: str
    avatar: str
    cover_image: str | None = None
    email: str


class OwnerBrief(CamelModel):
    id: UUID
    full_name: str
    username: str
    avatar: str


class LoginRequest(CamelModel):
    username: str | None = None
    email: str | None = None
    password: str | None = None


class RefreshRequest(CamelModel):
    refresh_token: str | None = None


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


class LoginResponse(TokenPair):
    user: UserResponse


class ChangePasswordRequest(CamelModel):
    old_password: str | None = None
    new_password: str | None = None


class AccountUpdate(CamelModel):
    full_name: str | None = None
    email: str | None = None
