"""Session endpoints used by the operator app."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from fusion_edge.api.deps import get_db
from fusion_edge.exceptions import FusionError
from fusion_edge.schemas.session import (
    InitSessionRequest,
    InitSessionResponse,
    OperatorRecordRequest,
    OperatorResult,
    SessionResult,
    SessionUpdateRequest,
)
from fusion_edge.services.session_service import init_session, record_hosted_session, update_session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/init-session", response_model=InitSessionResponse)
def init_operator_session(request: InitSessionRequest, db: Session = Depends(get_db)):
    """
    Open a session for an operator.

    - **operator_id**: operator staff id
    - **service_passcode**: the session's external reference
    """
    try:
        found = init_session(db, request)
        return InitSessionResponse(message="Operator and session found!", **found)
    except FusionError:
        raise
    except Exception as e:
        logger.exception(f"init-session failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.post("/update-session-status", response_model=SessionResult)
def update_session_status(request: SessionUpdateRequest, db: Session = Depends(get_db)):
    """Partially update a session; ``status`` must be a known session status."""
    try:
        session = update_session(db, request)
        return SessionResult(message="Session updated successfully", session=session)
    except FusionError:
        raise
    except Exception as e:
        logger.exception(f"update-session-status failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.post("/update-operator-record", response_model=OperatorResult, response_model_exclude_none=True)
def update_operator_record(request: OperatorRecordRequest, db: Session = Depends(get_db)):
    """Count a completed session towards the operator's ``sessions_hosted``."""
    try:
        operator = record_hosted_session(db, request.operator_id, request.operator_hosted_session_to_completion)
        if operator is None:
            return OperatorResult(message="No increment. operator_hosted_session_to_completion must be true.")
        return OperatorResult(message="Operator sessions_hosted incremented successfully", operator=operator)
    except FusionError:
        raise
    except Exception as e:
        logger.exception(f"update-operator-record failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
