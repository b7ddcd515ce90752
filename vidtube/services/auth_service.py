"""Authentication business logic.

Functions take the user record explicitly; the model carries no behaviour.
"""
import logging
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.exceptions import AuthError, ConflictError, NotFoundError, ValidationError
from vidtube.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_password_hash,
    parse_subject,
    verify_password,
)
from vidtube.models.user import User
from vidtube.schemas.user import UserPublic, UserResponse

logger = logging.getLogger(__name__)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_identifier(db: AsyncSession, username: str | None, email: str | None) -> User | None:
    """Find the user matching username OR email (case-insensitive)."""
    clauses = []
    if not _blank(username):
        clauses.append(User.username == username.strip().lower())
    if not _blank(email):
        clauses.append(func.lower(User.email) == email.strip().lower())
    if not clauses:
        return None
    result = await db.execute(select(User).where(or_(*clauses)).limit(1))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    *,
    full_name: str | None,
    email: str | None,
    username: str | None,
    password: str | None,
    avatar_url: str,
    cover_image_url: str | None = None,
) -> User:
    user = User(
        full_name=full_name.strip(),
        email=email.strip().lower(),
        username=username.strip().lower(),
        password_hash=get_password_hash(password),
        avatar=avatar_url,
        cover_image=cover_image_url,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        # lost a race against a concurrent registration of the same identity
        logger.info("Register conflict on flush: %s %s", user.username, user.email)
        await db.rollback()
        raise ConflictError("User with email or username already exists")
    await db.refresh(user)
    return user


def validate_registration(full_name, email, username, password) -> None:
    if any(_blank(field) for field in (full_name, email, username, password)):
        raise ValidationError("All fields are required")


async def ensure_identity_available(db: AsyncSession, username: str, email: str) -> None:
    if await get_user_by_identifier(db, username, email):
        raise ConflictError("User with email or username already exists")


def verify_user_password(user: User, candidate: str | None) -> bool:
    if not candidate:
        return False
    return verify_password(candidate, user.password_hash)


async def issue_tokens(db: AsyncSession, user: User) -> tuple[str, str]:
    """Issue an access/refresh pair and store the refresh token, replacing any previous one."""
    access_token = create_access_token(
        user.id, username=user.username, email=user.email, full_name=user.full_name
    )
    refresh_token = create_refresh_token(user.id)
    user.refresh_token = refresh_token
    await db.flush()
    await db.refresh(user)
    return access_token, refresh_token


async def login(db: AsyncSession, username: str | None, email: str | None, password: str | None) -> tuple[User, str, str]:
    if _blank(username) and _blank(email):
        raise ValidationError("username or email is required")
    user = await get_user_by_identifier(db, username, email)
    if not user:
        logger.info("Login failed: no user for %s", username or email)
        raise NotFoundError("User does not exist")
    if not verify_user_password(user, password):
        logger.info("Login failed: bad password for %s", user.id)
        raise AuthError("Invalid user credentials")
    access_token, refresh_token = await issue_tokens(db, user)
    logger.info("Login success: %s %s", user.id, user.username)
    return user, access_token, refresh_token


async def rotate_refresh_token(db: AsyncSession, incoming: str | None) -> tuple[str, str]:
    """Exchange a refresh token for a new pair. Only the currently stored token is accepted."""
    if not incoming:
        raise AuthError("Unauthorized request")
    payload = decode_refresh_token(incoming)
    user_id = parse_subject(payload) if payload else None
    if user_id is None:
        raise AuthError("Invalid refresh token")
    user = await get_user_by_id(db, user_id)
    if not user:
        raise AuthError("Invalid refresh token")
    if user.refresh_token is None or incoming != user.refresh_token:
        raise AuthError("Refresh token is expired or used")
    return await issue_tokens(db, user)


async def revoke_refresh_token(db: AsyncSession, user: User) -> None:
    user.refresh_token = None
    await db.flush()


async def change_password(db: AsyncSession, user: User, old_password: str | None, new_password: str | None) -> None:
    if not old_password or not new_password:
        raise ValidationError("old and new passwords required")
    if not verify_user_password(user, old_password):
        raise ValidationError("Invalid old password")
    user.password_hash = get_password_hash(new_password)
    await db.flush()


async def update_account(db: AsyncSession, user: User, full_name: str | None, email: str | None) -> User:
    if _blank(full_name) or _blank(email):
        raise ValidationError("All fields are required")
    email = email.strip().lower()
    result = await db.execute(
        select(User.id).where(func.lower(User.email) == email, User.id != user.id)
    )
    if result.first():
        raise ConflictError("Email is already used")
    user.full_name = full_name.strip()
    user.email = email
    await db.flush()
    await db.refresh(user)
    return user


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        avatar=user.avatar,
        cover_image=user.cover_image,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def user_to_public(user: User) -> UserPublic:
    return UserPublic(
        id=user.id,
        full_name=user.full_name,
        username=user.username,
        avatar=user.avatar,
        cover_image=user.cover_image,
        email=user.email,
    )
