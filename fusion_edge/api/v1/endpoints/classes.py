"""Class endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from fusion_edge.api.deps import get_db
from fusion_edge.exceptions import FusionError
from fusion_edge.schemas.session import ClassResult, ClassStudentsRequest, ClassStudentsResponse, ClassUpdateRequest
from fusion_edge.services.session_service import list_class_students, update_class

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/get-class-students", response_model=ClassStudentsResponse)
def get_class_students(request: ClassStudentsRequest, db: Session = Depends(get_db)):
    """List a class's students ordered by name."""
    try:
        students = list_class_students(db, request.class_id)
        return ClassStudentsResponse(message="Students retrieved!", class_id=request.class_id, students=students)
    except FusionError:
        raise
    except Exception as e:
        logger.exception(f"get-class-students failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.post("/update-class-status", response_model=ClassResult)
def update_class_status(request: ClassUpdateRequest, db: Session = Depends(get_db)):
    try:
        school_class = update_class(db, request)
        return ClassResult(message="Class updated successfully", class_=school_class)
    except FusionError:
        raise
    except Exception as e:
        logger.exception(f"update-class-status failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
