"""Subscription endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import get_current_user, get_db
from vidtube.models.user import User
from vidtube.schemas.channel import ChannelSubscribers, SubscribedChannels
from vidtube.schemas.common import ApiResponse
from vidtube.services.channel_service import get_channel_subscribers, get_subscribed_channels
from vidtube.services.subscription_service import ToggleResult, toggle_subscription

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])

TOGGLE_OUTCOMES = {
    ToggleResult.SUBSCRIBED: (status.HTTP_201_CREATED, "subscribed successfully"),
    ToggleResult.UNSUBSCRIBED: (status.HTTP_200_OK, "Unsubscribed successfully"),
    ToggleResult.ALREADY_SUBSCRIBED: (status.HTTP_200_OK, "Already subscribed"),
}


@router.post("/{channel_id}/toggle", response_model=ApiResponse[dict])
async def toggle_subscription_endpoint(
    channel_id: UUID,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    outcome = await toggle_subscription(db, current_user.id, channel_id)
    await db.commit()
    status_code, message = TOGGLE_OUTCOMES[outcome]
    response.status_code = status_code
    return ApiResponse(status_code=status_code, data={}, message=message)


@router.get("/{channel_id}/subscribers", response_model=ApiResponse[ChannelSubscribers])
async def list_channel_subscribers(
    channel_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    return ApiResponse(data=await get_channel_subscribers(db, channel_id), message="Subscribers fetched successfully")


@router.get("/user/{subscriber_id}/channels", response_model=ApiResponse[SubscribedChannels])
async def list_subscribed_channels(
    subscriber_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    return ApiResponse(
        data=await get_subscribed_channels(db, subscriber_id),
        message="Subscribed channels fetched successfully",
    )
