"""Staff provisioning endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from fusion_edge.api.deps import get_admin_user, get_auth_client, get_db
from fusion_edge.exceptions import FusionError
from fusion_edge.schemas.staff import StaffCreateRequest, StaffCreateResponse
from fusion_edge.services.auth_client import AuthClient, AuthUser
from fusion_edge.services.staff_service import create_staff_member

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create-staff", response_model=StaffCreateResponse)
def create_staff(
    request: StaffCreateRequest,
    admin: AuthUser = Depends(get_admin_user),
    auth: AuthClient = Depends(get_auth_client),
    db: Session = Depends(get_db),
):
    """
    Provision a staff member (admin only).

    - **email**, **fullName**, **phoneNumber**: contact details
    - **role**: platform role
    - **staffId**: public staff identifier
    """
    try:
        user_id = create_staff_member(db, auth, admin.id, request)
        return StaffCreateResponse(user_id=user_id, staff_id=request.staff_id)
    except FusionError:
        raise
    except Exception as e:
        logger.exception(f"create-staff failed: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
