from vidtube.schemas.common import ApiResponse, ErrorResponse
from vidtube.schemas.user import (
    UserResponse,
    UserPublic,
    LoginRequest,
    LoginResponse,
    TokenPair,
)
from vidtube.schemas.channel import ChannelProfile, ChannelSubscribers, SubscribedChannels
from vidtube.schemas.video import VideoResponse, WatchedVideo, VideoPage
from vidtube.schemas.tweet import TweetResponse, UserTweets
