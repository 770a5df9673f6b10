import logging

from app.core.celery_config import celery_app
from app.database.db import SessionLocal
from app.services.events import reconcile_participants_count

logger = logging.getLogger(__name__)


@celery_app.task(bind=True)
def reconcile_participants_task(self, event_id: int):
    """Rebuild an event's participants_count from its registrations."""
    db = SessionLocal()
    try:
        total = reconcile_participants_count(db, event_id)
    finally:
        db.close()

    if total is None:
        logger.info("Skipping reconcile for missing event %s", event_id)
    return total
