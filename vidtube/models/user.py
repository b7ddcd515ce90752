"""User model. Any user can act as a channel."""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text, Uuid
from sqlalchemy.orm import relationship

from vidtube.db.session import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(50), unique=True, nullable=False, index=True)  # stored lowercased
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(100), nullable=False)
    password_hash = Column(String(255), nullable=False)
    avatar = Column(Text, nullable=False)
    cover_image = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=True)  # single active refresh token
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    videos = relationship("Video", back_populates="owner")
    tweets = relationship("Tweet", back_populates="owner")
