from vidtube.models.user import User
from vidtube.models.video import Video
from vidtube.models.tweet import Tweet
from vidtube.models.subscription import Subscription
from vidtube.models.watch_history import WatchHistoryEntry

__all__ = ["User", "Video", "Tweet", "Subscription", "WatchHistoryEntry"]
