"""Celery worker and beat schedule for background housekeeping."""

from celery import Celery

from bookstore.config import get_settings

settings = get_settings()

PURGE_TASK = "bookstore.tasks.sessions.purge_expired_refresh_tokens"

app = Celery("bookstore", broker=settings.redis_url, backend=settings.redis_url)
app.conf.include = ["bookstore.tasks.sessions"]

app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    result_expires=24 * 60 * 60,
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_time_limit=120,
    task_soft_time_limit=90,
    broker_connection_retry_on_startup=True,
)

app.conf.beat_schedule = {
    "purge-expired-refresh-tokens": {
        "task": PURGE_TASK,
        "schedule": settings.refresh_token_purge_interval_minutes * 60,
        "options": {"expires": settings.refresh_token_purge_interval_minutes * 60},
    },
}
