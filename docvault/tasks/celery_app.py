"""
Celery Application
Background task processing
"""

from celery import Celery

from docvault.core.config import settings

# Create Celery app
celery_app = Celery(
    "docvault",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=600,
    task_soft_time_limit=540,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=100,
)

# Import tasks
from docvault.tasks import ingestion_tasks  # noqa
