"""Tweet business logic."""
from uuid import UUID

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from vidtube.models.tweet import Tweet
from vidtube.schemas.tweet import TweetResponse, UserTweets
from vidtube.services.auth_service import get_user_by_id, user_to_response


def _require_content(content: str | None) -> str:
    if not content or not content.strip():
        raise ValidationError("content is required")
    return content.strip()


async def create_tweet(db: AsyncSession, owner_id: UUID, content: str | None) -> Tweet:
    tweet = Tweet(owner_id=owner_id, content=_require_content(content))
    db.add(tweet)
    await db.flush()
    await db.refresh(tweet)
    return tweet


async def get_user_tweets(db: AsyncSession, user_id: UUID) -> UserTweets:
    user = await get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    result = await db.execute(
        select(Tweet).where(Tweet.owner_id == user_id).order_by(desc(Tweet.created_at))
    )
    tweets = result.scalars().all()
    return UserTweets(user=user_to_response(user), tweets=[tweet_to_response(t) for t in tweets])


async def _get_owned_tweet(db: AsyncSession, tweet_id: UUID, user_id: UUID) -> Tweet:
    result = await db.execute(select(Tweet).where(Tweet.id == tweet_id))
    tweet = result.scalar_one_or_none()
    if not tweet:
        raise NotFoundError("Tweet not found")
    if tweet.owner_id != user_id:
        raise ForbiddenError("You can only modify your own tweets")
    return tweet


async def update_tweet(db: AsyncSession, tweet_id: UUID, user_id: UUID, content: str | None) -> Tweet:
    content = _require_content(content)
    tweet = await _get_owned_tweet(db, tweet_id, user_id)
    tweet.content = content
    await db.flush()
    return tweet


async def delete_tweet(db: AsyncSession, tweet_id: UUID, user_id: UUID) -> None:
    tweet = await _get_owned_tweet(db, tweet_id, user_id)
    await db.delete(tweet)
    await db.flush()


def tweet_to_response(tweet: Tweet) -> TweetResponse:
    return TweetResponse(
        id=tweet.id,
        owner_id=tweet.owner_id,
        content=tweet.content,
        created_at=tweet.created_at,
        updated_at=tweet.updated_at,
    )
