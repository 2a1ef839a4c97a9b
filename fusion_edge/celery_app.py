"""Celery application shared by the API (sending) and the worker (executing)."""

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging as celery_setup_logging

from fusion_edge.config import Settings, get_settings
from fusion_edge.logging_config import setup_logging


def create_celery_app(settings: Settings) -> Celery:
    """Build the Celery app for the given settings."""
    app = Celery(
        "fusion_edge",
        broker=settings.celery_broker_url,
        backend=settings.celery_result_backend,
        include=["fusion_edge.tasks.notifications", "fusion_edge.tasks.maintenance"],
    )

    app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,
        task_track_started=True,
        task_always_eager=settings.celery_task_always_eager,
        beat_schedule={
            "run-maintenance-jobs": {
                "task": "fusion_edge.tasks.maintenance.run_maintenance_jobs",
                "schedule": crontab(minute="*/5"),
            },
        },
    )
    return app


@celery_setup_logging.connect
def configure_worker_logging(**kwargs):
    """Use the application's log format in worker processes."""
    setup_logging(get_settings().log_level)


celery_app = create_celery_app(get_settings())
