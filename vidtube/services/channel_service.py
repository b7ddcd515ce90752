"""Relationship queries: channel profile, subscriber lists and watch history.

Each view is one composed select executed by the database; Python only reshapes
rows. To-one joins come back as a single row per match, so nested owner/user
objects are always scalars, never lists.
"""
from uuid import UUID

from sqlalchemy import delete, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.exceptions import NotFoundError, ValidationError
from vidtube.models.subscription import Subscription
from vidtube.models.user import User
from vidtube.models.video import Video
from vidtube.models.watch_history import WatchHistoryEntry
from vidtube.schemas.channel import ChannelProfile, ChannelSubscribers, SubscribedChannels
from vidtube.schemas.user import OwnerBrief
from vidtube.schemas.video import WatchedVideo
from vidtube.services.auth_service import get_user_by_id, user_to_public
from vidtube.services.video_service import video_fields


async def get_channel_profile(db: AsyncSession, username: str | None, viewer_id: UUID | None) -> ChannelProfile:
    if not username or not username.strip():
        raise ValidationError("username is missing")

    subscribers_count = (
        select(func.count(Subscription.id))
        .where(Subscription.channel_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    subscribed_to_count = (
        select(func.count(Subscription.id))
        .where(Subscription.subscriber_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    columns = [
        User,
        subscribers_count.label("subscribers_count"),
        subscribed_to_count.label("channels_subscribed_to_count"),
    ]
    if viewer_id is not None:
        columns.append(
            exists()
            .where(Subscription.channel_id == User.id, Subscription.subscriber_id == viewer_id)
            .label("is_subscribed")
        )
    row = (
        await db.execute(select(*columns).where(User.username == username.strip().lower()))
    ).first()
    if row is None:
        raise NotFoundError("Channel does not exist")

    channel = row.User
    return ChannelProfile(
        id=channel.id,
        full_name=channel.full_name,
        username=channel.username,
        subscribers_count=row.subscribers_count,
        channels_subscribed_to_count=row.channels_subscribed_to_count,
        is_subscribed=bool(row.is_subscribed) if viewer_id is not None else False,
        avatar=channel.avatar,
        cover_image=channel.cover_image,
        email=channel.email,
    )


async def _get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    user = await get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def get_channel_subscribers(db: AsyncSession, channel_id: UUID) -> ChannelSubscribers:
    channel = await _get_user_or_404(db, channel_id)
    result = await db.execute(
        select(User)
        .join(Subscription, Subscription.subscriber_id == User.id)
        .where(Subscription.channel_id == channel_id)
        .order_by(Subscription.created_at)
    )
    subscribers = [user_to_public(u) for u in result.scalars().all()]
    return ChannelSubscribers(
        **user_to_public(channel).model_dump(),
        subscribers=subscribers,
        total=len(subscribers),
    )


async def get_subscribed_channels(db: AsyncSession, subscriber_id: UUID) -> SubscribedChannels:
    subscriber = await _get_user_or_404(db, subscriber_id)
    result = await db.execute(
        select(User)
        .join(Subscription, Subscription.channel_id == User.id)
        .where(Subscription.subscriber_id == subscriber_id)
        .order_by(Subscription.created_at)
    )
    channels = [user_to_public(u) for u in result.scalars().all()]
    return SubscribedChannels(
        **user_to_public(subscriber).model_dump(),
        channels=channels,
        total=len(channels),
    )


async def get_watch_history(db: AsyncSession, user_id: UUID) -> list[WatchedVideo]:
    """Watched videos with their owners, in stored history order.

    A video appears once, at the position of its latest entry.
    """
    latest = (
        select(WatchHistoryEntry.video_id, func.max(WatchHistoryEntry.id).label("seq"))
        .where(WatchHistoryEntry.user_id == user_id)
        .group_by(WatchHistoryEntry.video_id)
        .subquery()
    )
    result = await db.execute(
        select(Video, User)
        .join(latest, latest.c.video_id == Video.id)
        .join(User, User.id == Video.owner_id)
        .order_by(latest.c.seq)
    )
    return [
        WatchedVideo(
            **video_fields(video),
            owner=OwnerBrief(
                id=owner.id,
                full_name=owner.full_name,
                username=owner.username,
                avatar=owner.avatar,
            ),
        )
        for video, owner in result.all()
    ]


async def record_watch(db: AsyncSession, user_id: UUID, video_id: UUID) -> None:
    """Append a video to the user's history, moving it to the end if already present."""
    await db.execute(
        delete(WatchHistoryEntry).where(
            WatchHistoryEntry.user_id == user_id,
            WatchHistoryEntry.video_id == video_id,
        )
    )
    db.add(WatchHistoryEntry(user_id=user_id, video_id=video_id))
    await db.flush()
