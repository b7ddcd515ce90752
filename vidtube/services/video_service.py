"""Video business logic."""
import logging
import math
from uuid import UUID

from sqlalchemy import asc, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from vidtube.core.exceptions import ForbiddenError, InternalError, NotFoundError, ValidationError
from vidtube.models.video import Video
from vidtube.schemas.video import VideoPage, VideoResponse
from vidtube.services.auth_service import user_to_public
from vidtube.services.storage_service import delete_media, discard_temp_files, upload_media

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "createdAt": Video.created_at,
    "views": Video.views,
    "duration": Video.duration,
    "title": Video.title,
}


def _escape_like(term: str) -> str:
    """Make % and _ typed by the user match literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def video_fields(video: Video) -> dict:
    return {
        "id": video.id,
        "owner_id": video.owner_id,
        "title": video.title,
        "description": video.description,
        "video_file": video.video_file,
        "thumbnail": video.thumbnail,
        "duration": video.duration or 0,
        "views": video.views or 0,
        "is_published": video.is_published,
        "created_at": video.created_at,
        "updated_at": video.updated_at,
    }


def video_to_response(video: Video, with_owner: bool = True) -> VideoResponse:
    owner = user_to_public(video.owner) if with_owner and video.owner else None
    return VideoResponse(**video_fields(video), owner=owner)


async def publish_video(
    db: AsyncSession,
    owner_id: UUID,
    title: str | None,
    description: str | None,
    thumbnail_path: str | None,
    video_path: str | None,
) -> Video:
    """Validate, upload both files and create the video. Temp files never outlive the call."""
    if not title or not title.strip() or not description or not description.strip():
        discard_temp_files(thumbnail_path, video_path)
        raise ValidationError("Title and Description are required")
    if not thumbnail_path:
        discard_temp_files(video_path)
        raise ValidationError("Thumbnail is required")
    if not video_path:
        discard_temp_files(thumbnail_path)
        raise ValidationError("videoFile is required")

    thumbnail = await upload_media(thumbnail_path)
    if thumbnail is None:
        discard_temp_files(video_path)
        raise InternalError("Error while uploading thumbnail")
    video_file = await upload_media(video_path)
    if video_file is None:
        delete_media(thumbnail.url)
        raise InternalError("Error while uploading video file")

    video = Video(
        owner_id=owner_id,
        title=title.strip(),
        description=description.strip(),
        thumbnail=thumbnail.url,
        video_file=video_file.url,
        duration=video_file.duration or 0,
    )
    db.add(video)
    await db.flush()
    await db.refresh(video)
    logger.info("Video %s published by %s", video.id, owner_id)
    return video


async def get_video(db: AsyncSession, video_id: UUID) -> Video:
    result = await db.execute(
        select(Video).where(Video.id == video_id).options(selectinload(Video.owner))
    )
    video = result.scalar_one_or_none()
    if not video:
        raise NotFoundError("Video not found")
    return video


async def view_video(db: AsyncSession, video_id: UUID, viewer_id: UUID | None) -> Video:
    """Fetch a video for display and count the view. Unpublished videos are visible to their owner only."""
    video = await get_video(db, video_id)
    if not video.is_published and video.owner_id != viewer_id:
        raise NotFoundError("Video not found")
    video.views = (video.views or 0) + 1
    await db.flush()
    return video


async def get_owned_video(db: AsyncSession, video_id: UUID, user_id: UUID) -> Video:
    video = await get_video(db, video_id)
    if video.owner_id != user_id:
        raise ForbiddenError("You can only modify your own videos")
    return video


async def list_videos(
    db: AsyncSession,
    viewer_id: UUID | None,
    *,
    page: int = 1,
    limit: int = 10,
    query: str | None = None,
    user_id: UUID | None = None,
    sort_by: str = "createdAt",
    sort_type: str = "desc",
) -> VideoPage:
    sort_column = SORT_FIELDS.get(sort_by)
    if sort_column is None:
        raise ValidationError(f"sortBy must be one of: {', '.join(SORT_FIELDS)}")
    if sort_type not in ("asc", "desc"):
        raise ValidationError("sortType must be asc or desc")

    filters = []
    if user_id is not None:
        filters.append(Video.owner_id == user_id)
    if user_id is None or user_id != viewer_id:
        filters.append(Video.is_published.is_(True))
    if query and query.strip():
        pattern = f"%{_escape_like(query.strip())}%"
        filters.append(
            or_(
                Video.title.ilike(pattern, escape="\\"),
                Video.description.ilike(pattern, escape="\\"),
            )
        )

    total = (await db.execute(select(func.count(Video.id)).where(*filters))).scalar_one()
    order = asc(sort_column) if sort_type == "asc" else desc(sort_column)
    result = await db.execute(
        select(Video)
        .where(*filters)
        .order_by(order, desc(Video.id))
        .offset((page - 1) * limit)
        .limit(limit)
        .options(selectinload(Video.owner))
    )
    videos = result.scalars().all()
    return VideoPage(
        docs=[video_to_response(v) for v in videos],
        total_docs=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if total else 0,
    )


async def update_video(
    db: AsyncSession,
    video: Video,
    title: str | None,
    description: str | None,
    thumbnail_path: str | None,
) -> tuple[Video, str | None]:
    """Apply the changes. Returns the video and the replaced thumbnail URL, if any."""
    has_title = bool(title and title.strip())
    has_description = bool(description and description.strip())
    if not (has_title or has_description or thumbnail_path):
        raise ValidationError("title or description or thumbnail is required")

    old_thumbnail = None
    if thumbnail_path:
        thumbnail = await upload_media(thumbnail_path)
        if thumbnail is None:
            raise InternalError("Error while uploading thumbnail")
        old_thumbnail, video.thumbnail = video.thumbnail, thumbnail.url
    if has_title:
        video.title = title.strip()
    if has_description:
        video.description = description.strip()
    await db.flush()
    return video, old_thumbnail


async def delete_video(db: AsyncSession, video: Video) -> list[str]:
    """Delete the record. Returns the stored file URLs for the caller to discard."""
    files = [video.video_file, video.thumbnail]
    await db.delete(video)
    await db.flush()
    return files


async def toggle_publish(db: AsyncSession, video: Video) -> Video:
    video.is_published = not video.is_published
    await db.flush()
    return video
