"""Scheduled maintenance task."""

import logging

from fusion_edge.celery_app import celery_app
from fusion_edge.config import get_settings
from fusion_edge.services.maintenance_service import run_all
from fusion_edge.tasks import get_session_factory

logger = logging.getLogger(__name__)


@celery_app.task(name="fusion_edge.tasks.maintenance.run_maintenance_jobs")
def run_maintenance_jobs() -> dict:
    """Run every maintenance job once; returns per-job outcomes."""
    db = get_session_factory()()
    try:
        results = run_all(db, get_settings())
    finally:
        db.close()

    failed = [name for name, outcome in results.items() if not outcome["ok"]]
    if failed:
        logger.error(f"Maintenance jobs failed: {failed}")
    return results
