"""On-demand maintenance run."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from fusion_edge.api.deps import get_db, get_settings
from fusion_edge.config import Settings
from fusion_edge.database import utcnow
from fusion_edge.schemas.maintenance import BackgroundJobsResponse
from fusion_edge.services.maintenance_service import run_all

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/background-jobs", response_model=BackgroundJobsResponse)
def run_background_jobs(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    """Run every maintenance job once and report per-job outcomes."""
    try:
        now = utcnow()
        results = run_all(db, settings, now)
        return BackgroundJobsResponse(
            timestamp=now.isoformat() + "Z",
            jobs_run=list(results),
            results=results,
        )
    except Exception as e:
        logger.exception(f"Background jobs error: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Background jobs failed")
