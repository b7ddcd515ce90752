"""Pydantic schemas for Tweet."""
from datetime import datetime
from uuid import UUID

from vidtube.schemas.common import CamelModel
from vidtube.schemas.user import UserResponse


class TweetWrite(CamelModel):
    content: str | None = None


class TweetResponse(CamelModel):
    id: UUID
    owner_id: UUID
    content: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserTweets(CamelModel):
    user: UserResponse
    tweets: list[TweetResponse]
