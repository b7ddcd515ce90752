"""User endpoints: registration, credentials, profile and channel views."""
import logging

from fastapi import APIRouter, Body, Depends, File, Form, Request, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import ACCESS_COOKIE, REFRESH_COOKIE, get_current_user, get_current_user_optional, get_db
from vidtube.core.config import settings
from vidtube.core.exceptions import ConflictError, InternalError, ValidationError
from vidtube.models.user import User
from vidtube.schemas.channel import ChannelProfile
from vidtube.schemas.common import ApiResponse
from vidtube.schemas.user import (
    AccountUpdate,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    TokenPair,
    UserResponse,
)
from vidtube.schemas.video import WatchedVideo
from vidtube.services import auth_service
from vidtube.services.channel_service import get_channel_profile, get_watch_history
from vidtube.services.storage_service import delete_media, discard_temp_files, save_temp_upload, upload_media

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


class CookieConfig:
    HTTPONLY = True
    PATH = "/"
    ACCESS_MAX_AGE = 60 * settings.ACCESS_TOKEN_EXPIRE_MINUTES
    REFRESH_MAX_AGE = 60 * 60 * 24 * settings.REFRESH_TOKEN_EXPIRE_DAYS

    @classmethod
    def set_cookies(cls, response: Response, access: str, refresh: str) -> None:
        for name, token, max_age in [
            (ACCESS_COOKIE, access, cls.ACCESS_MAX_AGE),
            (REFRESH_COOKIE, refresh, cls.REFRESH_MAX_AGE),
        ]:
            response.set_cookie(
                key=name,
                value=token,
                httponly=cls.HTTPONLY,
                secure=settings.COOKIE_SECURE,
                samesite=settings.COOKIE_SAMESITE,
                max_age=max_age,
                path=cls.PATH,
            )

    @classmethod
    def clear_cookies(cls, response: Response) -> None:
        for name in (ACCESS_COOKIE, REFRESH_COOKIE):
            response.delete_cookie(
                key=name,
                httponly=cls.HTTPONLY,
                secure=settings.COOKIE_SECURE,
                samesite=settings.COOKIE_SAMESITE,
                path=cls.PATH,
            )


@router.post("/register", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def register(
    full_name: str | None = Form(None, alias="fullName"),
    email: str | None = Form(None),
    username: str | None = Form(None),
    password: str | None = Form(None),
    avatar: UploadFile | None = File(None),
    cover_image: UploadFile | None = File(None, alias="coverImage"),
    db: AsyncSession = Depends(get_db),
):
    logger.info("Register attempt: %s %s", username, email)
    avatar_path = await save_temp_upload(avatar)
    cover_path = await save_temp_upload(cover_image)
    try:
        auth_service.validate_registration(full_name, email, username, password)
        await auth_service.ensure_identity_available(db, username, email)
        if not avatar_path:
            raise ValidationError("Avatar is required")
    except Exception:
        discard_temp_files(avatar_path, cover_path)
        raise

    uploaded_avatar = await upload_media(avatar_path)
    if uploaded_avatar is None:
        discard_temp_files(cover_path)
        raise InternalError("Error while uploading avatar")
    uploaded_cover = await upload_media(cover_path)

    cover_url = uploaded_cover.url if uploaded_cover else None
    try:
        user = await auth_service.create_user(
            db,
            full_name=full_name,
            email=email,
            username=username,
            password=password,
            avatar_url=uploaded_avatar.url,
            cover_image_url=cover_url,
        )
    except ConflictError:
        delete_media(uploaded_avatar.url)
        delete_media(cover_url)
        raise
    await db.commit()
    logger.info("Register success: %s %s", user.id, user.username)
    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        data=auth_service.user_to_response(user),
        message="User registered successfully",
    )


@router.post("/login", response_model=ApiResponse[LoginResponse])
async def login(
    data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    user, access_token, refresh_token = await auth_service.login(db, data.username, data.email, data.password)
    await db.commit()
    CookieConfig.set_cookies(response, access_token, refresh_token)
    return ApiResponse(
        data=LoginResponse(
            user=auth_service.user_to_response(user),
            access_token=access_token,
            refresh_token=refresh_token,
        ),
        message="User logged in successfully",
    )


@router.post("/logout", response_model=ApiResponse[dict])
async def logout(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await auth_service.revoke_refresh_token(db, current_user)
    await db.commit()
    CookieConfig.clear_cookies(response)
    logger.info("Logout: %s", current_user.id)
    return ApiResponse(data={}, message="User logged out")


@router.post("/refresh-token", response_model=ApiResponse[TokenPair])
async def refresh_token(
    request: Request,
    response: Response,
    body: RefreshRequest | None = Body(None),
    db: AsyncSession = Depends(get_db),
):
    incoming = request.cookies.get(REFRESH_COOKIE) or (body.refresh_token if body else None)
    access_token, new_refresh_token = await auth_service.rotate_refresh_token(db, incoming)
    await db.commit()
    CookieConfig.set_cookies(response, access_token, new_refresh_token)
    return ApiResponse(
        data=TokenPair(access_token=access_token, refresh_token=new_refresh_token),
        message="Access token refreshed",
    )


@router.post("/change-password", response_model=ApiResponse[dict])
async def change_password(
    data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await auth_service.change_password(db, current_user, data.old_password, data.new_password)
    await db.commit()
    return ApiResponse(data={}, message="Password changed successfully")


@router.get("/current-user", response_model=ApiResponse[UserResponse])
async def read_current_user(current_user: User = Depends(get_current_user)):
    return ApiResponse(data=auth_service.user_to_response(current_user), message="User fetched successfully")


@router.patch("/update-account", response_model=ApiResponse[UserResponse])
async def update_account(
    data: AccountUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await auth_service.update_account(db, current_user, data.full_name, data.email)
    await db.commit()
    return ApiResponse(data=auth_service.user_to_response(user), message="Account details updated successfully")


async def _replace_image(db: AsyncSession, user: User, file: UploadFile | None, field: str, label: str) -> User:
    """Upload a new profile image and store its URL. The previous remote file is dropped after commit."""
    local_path = await save_temp_upload(file)
    if not local_path:
        raise ValidationError(f"{label} is required")
    uploaded = await upload_media(local_path)
    if uploaded is None:
        raise InternalError(f"Error while uploading {label}")
    previous = getattr(user, field)
    setattr(user, field, uploaded.url)
    await db.commit()
    delete_media(previous)
    return user


@router.patch("/avatar", response_model=ApiResponse[UserResponse])
async def update_avatar(
    avatar: UploadFile | None = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await _replace_image(db, current_user, avatar, "avatar", "avatar")
    return ApiResponse(data=auth_service.user_to_response(user), message="Avatar image updated successfully")


@router.patch("/cover-image", response_model=ApiResponse[UserResponse])
async def update_cover_image(
    cover_image: UploadFile | None = File(None, alias="coverImage"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await _replace_image(db, current_user, cover_image, "cover_image", "coverImage")
    return ApiResponse(data=auth_service.user_to_response(user), message="Cover image updated successfully")


@router.get("/channel/{username}", response_model=ApiResponse[ChannelProfile])
async def channel_profile(
    username: str,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    viewer_id = current_user.id if current_user else None
    channel = await get_channel_profile(db, username, viewer_id)
    return ApiResponse(data=channel, message="User channel fetched successfully")


@router.get("/watch-history", response_model=ApiResponse[list[WatchedVideo]])
async def watch_history(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    videos = await get_watch_history(db, current_user.id)
    return ApiResponse(data=videos, message="Watch history fetched successfully")
