"""Tweet endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import get_current_user, get_db
from vidtube.models.user import User
from vidtube.schemas.common import ApiResponse
from vidtube.schemas.tweet import TweetResponse, TweetWrite, UserTweets
from vidtube.services.tweet_service import (
    create_tweet,
    delete_tweet,
    get_user_tweets,
    tweet_to_response,
    update_tweet,
)

router = APIRouter(prefix="/tweets", tags=["tweets"])


@router.post("", response_model=ApiResponse[TweetResponse], status_code=status.HTTP_201_CREATED)
async def create_tweet_endpoint(
    data: TweetWrite,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    tweet = await create_tweet(db, current_user.id, data.content)
    await db.commit()
    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        data=tweet_to_response(tweet),
        message="Tweet created successfully",
    )


@router.get("/user/{user_id}", response_model=ApiResponse[UserTweets])
async def list_user_tweets(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    return ApiResponse(data=await get_user_tweets(db, user_id), message="Tweets fetched successfully")


@router.patch("/{tweet_id}", response_model=ApiResponse[TweetResponse])
async def update_tweet_endpoint(
    tweet_id: UUID,
    data: TweetWrite,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    tweet = await update_tweet(db, tweet_id, current_user.id, data.content)
    await db.commit()
    return ApiResponse(data=tweet_to_response(tweet), message="Tweet updated successfully")


@router.delete("/{tweet_id}", response_model=ApiResponse[dict])
async def delete_tweet_endpoint(
    tweet_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_tweet(db, tweet_id, current_user.id)
    await db.commit()
    return ApiResponse(data={}, message="Tweet deleted successfully")
