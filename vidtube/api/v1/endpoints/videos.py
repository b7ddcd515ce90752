"""Video endpoints: publishing, browsing and owner maintenance."""
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import get_current_user, get_current_user_optional, get_db
from vidtube.models.user import User
from vidtube.schemas.common import ApiResponse
from vidtube.schemas.video import VideoPage, VideoResponse
from vidtube.services import video_service
from vidtube.services.channel_service import record_watch
from vidtube.services.storage_service import delete_media, save_temp_upload

router = APIRouter(prefix="/videos", tags=["videos"])


@router.get("", response_model=ApiResponse[VideoPage])
async def list_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    query: str | None = Query(None),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_type: str = Query("desc", alias="sortType"),
    user_id: UUID | None = Query(None, alias="userId"),
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    viewer_id = current_user.id if current_user else None
    videos = await video_service.list_videos(
        db,
        viewer_id,
        page=page,
        limit=limit,
        query=query,
        user_id=user_id,
        sort_by=sort_by,
        sort_type=sort_type,
    )
    return ApiResponse(data=videos, message="Videos fetched successfully")


@router.post("", response_model=ApiResponse[VideoResponse], status_code=status.HTTP_201_CREATED)
async def publish_video(
    title: str | None = Form(None),
    description: str | None = Form(None),
    thumbnail: UploadFile | None = File(None),
    video_file: UploadFile | None = File(None, alias="videoFile"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    thumbnail_path = await save_temp_upload(thumbnail)
    video_path = await save_temp_upload(video_file)
    video = await video_service.publish_video(
        db, current_user.id, title, description, thumbnail_path, video_path
    )
    await db.commit()
    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        data=video_service.video_to_response(video, with_owner=False),
        message="Video uploaded successfully",
    )


@router.get("/{video_id}", response_model=ApiResponse[VideoResponse])
async def get_video(
    video_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    viewer_id = current_user.id if current_user else None
    video = await video_service.view_video(db, video_id, viewer_id)
    if viewer_id is not None:
        await record_watch(db, viewer_id, video.id)
    await db.commit()
    return ApiResponse(data=video_service.video_to_response(video), message="Video fetched successfully")


@router.patch("/{video_id}", response_model=ApiResponse[VideoResponse])
async def update_video(
    video_id: UUID,
    title: str | None = Form(None),
    description: str | None = Form(None),
    thumbnail: UploadFile | None = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    video = await video_service.get_owned_video(db, video_id, current_user.id)
    thumbnail_path = await save_temp_upload(thumbnail)
    video, replaced_thumbnail = await video_service.update_video(db, video, title, description, thumbnail_path)
    await db.commit()
    delete_media(replaced_thumbnail)
    return ApiResponse(data=video_service.video_to_response(video), message="Video updated successfully")


@router.delete("/{video_id}", response_model=ApiResponse[VideoResponse])
async def delete_video(
    video_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    video = await video_service.get_owned_video(db, video_id, current_user.id)
    data = video_service.video_to_response(video)
    files = await video_service.delete_video(db, video)
    await db.commit()
    for url in files:
        delete_media(url)
    return ApiResponse(data=data, message="Video deleted successfully")


@router.patch("/{video_id}/toggle-publish", response_model=ApiResponse[VideoResponse])
async def toggle_publish_status(
    video_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    video = await video_service.get_owned_video(db, video_id, current_user.id)
    video = await video_service.toggle_publish(db, video)
    await db.commit()
    return ApiResponse(data=video_service.video_to_response(video), message="Publish status toggled successfully")
