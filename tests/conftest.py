"""Shared fixtures: in-memory SQLite app, local media storage, eager Celery."""
import os
import tempfile

_workdir = tempfile.mkdtemp(prefix="vidtube-tests-")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_workdir, "uploads"))
os.environ.setdefault("TEMP_UPLOAD_DIR", os.path.join(_workdir, "uploads", "temp"))
os.environ.setdefault("MEDIA_BASE_URL", "http://test")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from vidtube.core.celery_app import celery_app  # noqa: E402
from vidtube.core.config import settings  # noqa: E402
from vidtube.db.base import Base  # noqa: E402
from vidtube.db.session import get_db  # noqa: E402
from vidtube.main import app  # noqa: E402
from vidtube.services import storage_service  # noqa: E402

API = "/api/v1"
PASSWORD = "secret123"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
MP4_BYTES = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 64


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
def storage(tmp_path, monkeypatch):
    local = storage_service.LocalStorage(base_dir=tmp_path / "uploads", base_url="http://test")
    monkeypatch.setattr(storage_service, "_storage", local)
    monkeypatch.setattr(settings, "TEMP_UPLOAD_DIR", str(tmp_path / "temp"))
    monkeypatch.setattr(celery_app.conf, "task_always_eager", True)
    return local


@pytest.fixture
async def client(session_maker, storage):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def register(client, username: str, *, email=None, password=PASSWORD, full_name=None, cover=False):
    files = {"avatar": ("avatar.png", PNG_BYTES, "image/png")}
    if cover:
        files["coverImage"] = ("cover.png", PNG_BYTES, "image/png")
    data = {
        "fullName": full_name or username.title(),
        "email": email or f"{username}@example.com",
        "username": username,
        "password": password,
    }
    return await client.post(f"{API}/users/register", data=data, files=files)


async def login(client, username: str, password: str = PASSWORD) -> dict:
    """Log in and return the login payload. Cookies are dropped so each test picks its identity by header."""
    resp = await client.post(f"{API}/users/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    client.cookies.clear()
    return resp.json()["data"]


@pytest.fixture
def make_user(client):
    """Register and log in a user; returns the login payload plus ready-made auth headers."""

    async def _make(username: str, **kwargs) -> dict:
        resp = await register(client, username, **kwargs)
        assert resp.status_code == 201, resp.text
        payload = await login(client, username, kwargs.get("password", PASSWORD))
        payload["headers"] = auth_headers(payload["accessToken"])
        payload["id"] = payload["user"]["id"]
        return payload

    return _make


async def publish(client, headers: dict, title: str = "My video", description: str = "About it"):
    files = {
        "thumbnail": ("thumb.png", PNG_BYTES, "image/png"),
        "videoFile": ("clip.mp4", MP4_BYTES, "video/mp4"),
    }
    return await client.post(
        f"{API}/videos",
        data={"title": title, "description": description},
        files=files,
        headers=headers,
    )
