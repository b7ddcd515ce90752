"""Pydantic schemas for Video."""
from datetime import datetime
from uuid import UUID

from vidtube.schemas.common import CamelModel
from vidtube.schemas.user import OwnerBrief, UserPublic


class VideoBase(CamelModel):
    id: UUID
    owner_id: UUID
    title: str
    description: str
    video_file: str
    thumbnail: str
    duration: float = 0
    views: int = 0
    is_published: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class VideoResponse(VideoBase):
    owner: UserPublic | None = None


class WatchedVideo(VideoBase):
    owner: OwnerBrief | None = None


class VideoPage(CamelModel):
    docs: list[VideoResponse]
    total_docs: int
    page: int
    limit: int
    total_pages: int
