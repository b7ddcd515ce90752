"""V1 API router aggregation."""
from fastapi import APIRouter

from vidtube.api.v1.endpoints import subscriptions, tweets, users, videos

api_router = APIRouter(prefix="/v1")
api_router.include_router(users.router)
api_router.include_router(tweets.router)
api_router.include_router(videos.router)
api_router.include_router(subscriptions.router)
