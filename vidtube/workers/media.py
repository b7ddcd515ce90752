"""Celery tasks for stored media."""
from celery.utils.log import get_task_logger

from vidtube.core.celery_app import celery_app
from vidtube.services.storage_service import get_storage

logger = get_task_logger(__name__)


@celery_app.task
def delete_media_file(public_id: str) -> bool:
    """Destroy a stored file by public id. The result is only logged."""
    deleted = get_storage().destroy(public_id)
    logger.info("Destroy %s: %s", public_id, "ok" if deleted else "not found")
    return deleted
