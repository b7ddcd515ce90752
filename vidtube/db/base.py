"""SQLAlchemy declarative base and model imports for Alembic."""
from vidtube.db.session import Base  # noqa: F401
from vidtube.models.user import User  # noqa: F401
from vidtube.models.video import Video  # noqa: F401
from vidtube.models.tweet import Tweet  # noqa: F401
from vidtube.models.subscription import Subscription  # noqa: F401
from vidtube.models.watch_history import WatchHistoryEntry  # noqa: F401

__all__ = ["Base", "User", "Video", "Tweet", "Subscription", "WatchHistoryEntry"]
