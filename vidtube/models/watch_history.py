"""Ordered watch history of a user.

Rows are append-only; the autoincrement id gives the order, so concurrent
appends never compete for a slot. video_id has no foreign key: deleting a video
leaves history rows in place and the history query simply stops returning it.
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Uuid

from vidtube.db.session import Base


class WatchHistoryEntry(Base):
    __tablename__ = "watch_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    video_id = Column(Uuid, nullable=False, index=True)
    watched_at = Column(DateTime, default=datetime.utcnow)
