"""Celery tasks for refresh token housekeeping."""

import logging

from sqlalchemy.orm import Session

from bookstore.celery_app import app as celery_app
from bookstore.database import SessionLocal
from bookstore.services.auth import purge_expired_refresh_tokens as purge_expired

logger = logging.getLogger(__name__)


@celery_app.task
def purge_expired_refresh_tokens() -> dict:
    """Delete refresh tokens past their expiry.

    This task runs hourly via celery-beat.

    Returns:
        dict with the number of purged tokens
    """
    db: Session = SessionLocal()
    try:
        purged = purge_expired(db)
        logger.info(f"Purged {purged} expired refresh token(s)")
        return {"purged": purged}
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
