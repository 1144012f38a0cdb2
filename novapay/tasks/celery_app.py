"""
Celery application for NovaPay background work.

Notification e-mails run on their own queue so a slow e-mail provider
cannot hold up any other worker.
"""

from celery import Celery

from novapay.config import settings

celery_app = Celery(
    "novapay",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_routes={
        "novapay.tasks.notification_tasks.*": {"queue": "notifications"},
    },
)

celery_app.autodiscover_tasks(["novapay.tasks"])
