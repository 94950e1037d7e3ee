"""
Celery Application
Background task processing
Source: https://docs.celeryq.dev/en/stable/getting-started/first-steps-with-celery.html
Verified: 2025-12-18
"""

from celery import Celery, signals
from celery.schedules import crontab

from hbx_core.core.config import get_exchange_settings
from hbx_core.utils.logging import setup_logging_from_settings

settings = get_exchange_settings()

celery_app = Celery(
    "hbx_core",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.EXCHANGE_TIMEZONE,
    enable_utc=True,
    task_track_started=True,
    task_time_limit=30 * 60,  # 30 minutes
    task_soft_time_limit=25 * 60,  # 25 minutes
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
)

# Advance the date of record just after midnight at the exchange
celery_app.conf.beat_schedule = {
    "push-date-of-record": {
        "task": "time_keeper.push_date_of_record",
        "schedule": crontab(hour=0, minute=1),
    },
}

celery_app.autodiscover_tasks(["hbx_core.tasks"], related_name="time_keeper")


@signals.setup_logging.connect
def configure_worker_logging(**kwargs) -> None:
    """Workers log through loguru instead of Celery's own logging setup."""
    setup_logging_from_settings()
