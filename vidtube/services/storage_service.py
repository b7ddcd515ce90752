"""Media relay: forwards local temp files to object storage and removes them again.

Two backends implement the StorageBackend interface: LocalStorage (files under
UPLOAD_DIR, served by the app's /uploads mount) and S3Storage (MinIO/S3 via boto3).
Remote objects are addressed by a public id: the last URL path segment without
its extension.
"""
import json
import logging
import shutil
import subprocess
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import boto3
from fastapi import UploadFile
from kombu.exceptions import OperationalError
from starlette.concurrency import run_in_threadpool

from vidtube.core.config import settings

logger = logging.getLogger(__name__)

MEDIA_PREFIX = "media"


@dataclass
class UploadResult:
    url: str
    public_id: str
    duration: float | None = None


class StorageBackend(Protocol):
    """Protocol for storage backends."""

    def upload(self, local_path: str | Path, public_id: str) -> str:
        """Store the file and return its public URL."""
        ...

    def destroy(self, public_id: str) -> bool:
        """Delete the object(s) stored under public_id. Returns True if anything was deleted."""
        ...


class LocalStorage:
    """Store files on local disk. Path: uploads/media/{public_id}.{ext}"""

    def __init__(self, base_dir: str | Path | None = None, base_url: str | None = None):
        self.base_dir = Path(base_dir or settings.UPLOAD_DIR).resolve()
        self.base_url = (base_url or settings.MEDIA_BASE_URL).rstrip("/")

    def _media_path(self) -> Path:
        path = self.base_dir / MEDIA_PREFIX
        path.mkdir(parents=True, exist_ok=True)
        return path

    def upload(self, local_path: str | Path, public_id: str) -> str:
        filename = f"{public_id}{Path(local_path).suffix}"
        shutil.copy2(local_path, self._media_path() / filename)
        return f"{self.base_url}/uploads/{MEDIA_PREFIX}/{filename}"

    def destroy(self, public_id: str) -> bool:
        deleted = False
        for filepath in self._media_path().glob(f"{public_id}.*"):
            filepath.unlink(missing_ok=True)
            deleted = True
        return deleted


class S3Storage:
    """Store files in an S3-compatible bucket under media/{public_id}.{ext}"""

    def __init__(self, client=None, bucket: str | None = None, public_url: str | None = None):
        self.client = client or boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT_URL,
            aws_access_key_id=settings.S3_ACCESS_KEY,
            aws_secret_access_key=settings.S3_SECRET_KEY,
        )
        self.bucket = bucket or settings.S3_BUCKET_MEDIA
        base = public_url or settings.S3_PUBLIC_URL or f"{settings.S3_ENDPOINT_URL}/{self.bucket}"
        self.public_url = base.rstrip("/")

    def upload(self, local_path: str | Path, public_id: str) -> str:
        key = f"{MEDIA_PREFIX}/{public_id}{Path(local_path).suffix}"
        self.client.upload_file(str(local_path), self.bucket, key)
        return f"{self.public_url}/{key}"

    def destroy(self, public_id: str) -> bool:
        listing = self.client.list_objects_v2(Bucket=self.bucket, Prefix=f"{MEDIA_PREFIX}/{public_id}")
        keys = [obj["Key"] for obj in listing.get("Contents", [])]
        for key in keys:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        return bool(keys)


_storage: StorageBackend | None = None


def get_storage() -> StorageBackend:
    global _storage
    if _storage is None:
        _storage = S3Storage() if settings.STORAGE_BACKEND == "s3" else LocalStorage()
    return _storage


def probe_duration(local_path: str | Path) -> float | None:
    """Media duration in seconds via ffprobe, or None when unavailable."""
    if shutil.which("ffprobe") is None:
        return None
    try:
        out = subprocess.run(
            ["ffprobe", "-v", "quiet", "-print_format", "json", "-show_format", str(local_path)],
            capture_output=True,
            text=True,
            timeout=30,
        )
        return float(json.loads(out.stdout or "{}")["format"]["duration"])
    except (subprocess.SubprocessError, ValueError, KeyError):
        return None


def public_id_from_url(url: str) -> str:
    return url.rstrip("/").split("/")[-1].split(".")[0]


def _upload(local_path: str) -> UploadResult | None:
    try:
        public_id = uuid.uuid4().hex
        duration = probe_duration(local_path)
        url = get_storage().upload(local_path, public_id)
        return UploadResult(url=url, public_id=public_id, duration=duration)
    except Exception:
        logger.exception("Upload failed for %s", local_path)
        return None
    finally:
        Path(local_path).unlink(missing_ok=True)


async def upload_media(local_path: str | None) -> UploadResult | None:
    """Upload a local temp file. Returns None on failure; the temp file is always removed."""
    if not local_path:
        return None
    return await run_in_threadpool(_upload, local_path)


def delete_media(url: str | None) -> None:
    """Schedule deletion of a stored file. Fire-and-forget: failures are only logged."""
    if not url:
        return
    from vidtube.workers.media import delete_media_file

    public_id = public_id_from_url(url)
    try:
        delete_media_file.delay(public_id)
    except OperationalError:
        logger.exception("Could not schedule deletion of %s", public_id)


async def save_temp_upload(file: UploadFile | None) -> str | None:
    """Write a multipart upload to TEMP_UPLOAD_DIR and return its path."""
    if file is None or not file.filename:
        return None
    temp_dir = Path(settings.TEMP_UPLOAD_DIR)
    temp_dir.mkdir(parents=True, exist_ok=True)
    path = temp_dir / f"{uuid.uuid4().hex}{Path(file.filename).suffix}"
    path.write_bytes(await file.read())
    return str(path)


def discard_temp_files(*paths: str | None) -> None:
    for path in paths:
        if path:
            Path(path).unlink(missing_ok=True)
