"""View models produced by the relationship query layer."""
from uuid import UUID

from vidtube.schemas.common import CamelModel
from vidtube.schemas.user import UserPublic


class ChannelProfile(CamelModel):
    id: UUID
    full_name: str
    username: str
    subscribers_count: int = 0
    channels_subscribed_to_count: int = 0
    is_subscribed: bool = False
    avatar: str
    cover_image: str | None = None
    email: str


class ChannelSubscribers(UserPublic):
    subscribers: list[UserPublic] = []
    total: int = 0


class SubscribedChannels(UserPublic):
    channels: list[UserPublic] = []
    total: int = 0
