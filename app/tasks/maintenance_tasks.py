import logging

from app.tasks.celery_app import celery_app
from app.database import SessionLocal
from app.services.auth_service import AuthService
from app.services.storage_service import StorageService

logger = logging.getLogger(__name__)


@celery_app.task(name="purge_expired_sessions")
def purge_expired_sessions() -> dict:
    """
    Sign out every admin session whose lifetime has passed.

    Runs every minute from the beat schedule.

    Returns:
        Dictionary with the number of purged sessions
    """
    db = SessionLocal()

    try:
        purged = AuthService(db).purge_expired()
        return {"status": "success", "purged": purged}
    except Exception as e:
        logger.error(f"Error purging expired sessions: {e}")
        db.rollback()
        raise
    finally:
        db.close()


@celery_app.task(bind=True, name="delete_stored_image")
def delete_stored_image(self, image_url: str) -> dict:
    """
    Remove an image file that no product references any more.

    Queued when a product is deleted or its image is replaced.

    Args:
        image_url: Public URL returned by the storage service

    Returns:
        Dictionary with the deletion result
    """
    logger.info(f"Deleting stored image {image_url}")

    try:
        deleted = StorageService().delete(image_url)
    except OSError as e:
        logger.error(f"Error deleting image {image_url}: {e}")
        raise self.retry(exc=e, countdown=30, max_retries=3)

    return {"status": "deleted" if deleted else "skipped", "image_url": image_url}
