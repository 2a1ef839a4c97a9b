"""Student endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from fusion_edge.api.deps import get_db
from fusion_edge.exceptions import FusionError
from fusion_edge.schemas.session import RecordLookupRequest, StudentResult, StudentUpdateRequest
from fusion_edge.services.session_service import get_student, update_student

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/refresh-student-data", response_model=StudentResult)
def refresh_student_data(request: RecordLookupRequest, db: Session = Depends(get_db)):
    """Reload one student."""
    try:
        student = get_student(db, request.id)
        return StudentResult(message="Student data refreshed successfully", student=student)
    except FusionError:
        raise
    except Exception as e:
        logger.exception(f"refresh-student-data failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.post("/update-student-status", response_model=StudentResult)
def update_student_status(request: StudentUpdateRequest, db: Session = Depends(get_db)):
    """Record print progress for a student."""
    try:
        student = update_student(db, request)
        return StudentResult(message="Student updated successfully", student=student)
    except FusionError:
        raise
    except Exception as e:
        logger.exception(f"update-student-status failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
