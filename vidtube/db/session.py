"""Async database session and engine."""
import logging
from collections.abc import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from vidtube.core.config import settings

logger = logging.getLogger(__name__)

# credentials never reach the log
_url = make_url(settings.DATABASE_URL)
logger.info("Database: %s", _url.render_as_string(hide_password=True))

_engine_options: dict = {"echo": settings.DEBUG, "pool_pre_ping": True}
if _url.get_backend_name() == "postgresql":
    _engine_options.update(pool_size=10, max_overflow=20, connect_args={"timeout": 10})

engine = create_async_engine(_url, **_engine_options)


class Base(DeclarativeBase):
    pass


async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request: committed when the handler returns, rolled back if it raises."""
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        else:
            await session.commit()
