"""Subscription toggling.

The (subscriber, channel) pair is unique at the storage layer; an insert that
loses a race against a concurrent toggle is reported as already subscribed.
"""
import enum
import logging
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.exceptions import NotFoundError, ValidationError
from vidtube.models.subscription import Subscription
from vidtube.services.auth_service import get_user_by_id

logger = logging.getLogger(__name__)


class ToggleResult(enum.Enum):
    SUBSCRIBED = "subscribed"
    UNSUBSCRIBED = "unsubscribed"
    ALREADY_SUBSCRIBED = "already_subscribed"


async def toggle_subscription(db: AsyncSession, subscriber_id: UUID, channel_id: UUID) -> ToggleResult:
    if subscriber_id == channel_id:
        raise ValidationError("You cannot subscribe to your own channel")
    if not await get_user_by_id(db, channel_id):
        raise NotFoundError("Channel does not exist")

    result = await db.execute(
        delete(Subscription).where(
            Subscription.subscriber_id == subscriber_id,
            Subscription.channel_id == channel_id,
        )
    )
    if result.rowcount > 0:
        return ToggleResult.UNSUBSCRIBED

    db.add(Subscription(subscriber_id=subscriber_id, channel_id=channel_id))
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.info("Duplicate subscription %s -> %s", subscriber_id, channel_id)
        return ToggleResult.ALREADY_SUBSCRIBED
    return ToggleResult.SUBSCRIBED
