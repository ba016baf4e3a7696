from __future__ import annotations

from celery import Celery
from celery.signals import beat_init, worker_process_init

from dynamic_secrets.core.config import settings
from dynamic_secrets.core.logging import setup_logging

celery_app = Celery(
    "dynamic_secrets",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["dynamic_secrets.tasks.dynamic_secret"],
)

celery_app.conf.update(
    task_default_queue=settings.CELERY_TASK_DEFAULT_QUEUE,
    timezone=settings.CELERY_TIMEZONE,
    enable_utc=True,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],

    # prune jobs must survive a worker crash
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_send_sent_event=True,

    task_annotations={
        "*": {
            "rate_limit": "100/s",
        },
    },

    beat_schedule={
        "reconcile-deleting-dynamic-secrets": {
            "task": "dynamic_secret.reconcile_deleting",
            "schedule": settings.DYNAMIC_SECRET_RECONCILE_INTERVAL_SECONDS,
            "options": {"expires": settings.DYNAMIC_SECRET_RECONCILE_INTERVAL_SECONDS * 0.8},
        },
    },
    task_routes={
        "dynamic_secret.*": {"queue": settings.DYNAMIC_SECRET_PRUNE_QUEUE},
        "*": {"queue": "default"},
    },
)


@worker_process_init.connect
def init_worker_logging(**kwargs):
    """
    Configure application logging when a worker process starts.
    """
    setup_logging()


@beat_init.connect
def init_beat_logging(**kwargs):
    """
    Configure application logging when beat starts.
    """
    setup_logging()
