"""Staff provisioning business logic."""

import logging
import secrets
import string

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fusion_edge.exceptions import AuthError, ClientInputError, ForbiddenError
from fusion_edge.models.staff import Profile, Staff, UserRole, UserRoleAssignment
from fusion_edge.schemas.staff import StaffCreateRequest
from fusion_edge.services.auth_client import AuthClient, AuthProviderError, AuthUser

logger = logging.getLogger(__name__)

_PASSWORD_ALPHABET = string.ascii_lowercase + string.digits
_PASSWORD_LENGTH = 12


class StaffProvisioningError(ClientInputError):
    """A provisioning step failed; earlier steps were undone."""


def generate_password(length: int = _PASSWORD_LENGTH) -> str:
    """Random throwaway password; staff set their own through password reset."""
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))


def authenticate_bearer(auth: AuthClient, authorization: str) -> AuthUser:
    """
    Resolve an ``Authorization: Bearer <token>`` header to a user.

    Raises:
        AuthError: Missing/malformed header or token rejected
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthError("Unauthorized")
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise AuthError("Unauthorized")

    user = auth.get_user(token)
    if not user:
        logger.error("Auth error: token rejected by provider")
        raise AuthError("Unauthorized")
    return user


def require_admin(db: Session, user: AuthUser) -> Profile:
    """
    Check that the user's profile has the ADMIN role.

    Raises:
        ForbiddenError: No profile or not an admin
    """
    profile = db.query(Profile).filter(Profile.id == user.id).first()
    if not profile or profile.role != UserRole.ADMIN:
        logger.error(f"Permission check failed for user {user.id}")
        raise ForbiddenError("Forbidden: Admin access required")
    return profile


def _rollback_auth_user(auth: AuthClient, user_id: str) -> None:
    try:
        auth.delete_user(user_id)
    except AuthProviderError as e:
        logger.error(f"Failed to clean up auth user {user_id}: {e}")


def create_staff_member(
    db: Session,
    auth: AuthClient,
    admin_user_id: str,
    request: StaffCreateRequest,
) -> str:
    """
    Provision a staff member: auth user, staff row, role row.

    A failure after the auth user exists removes what was created so far.

    Args:
        db: Database session
        auth: Auth provider client
        admin_user_id: Id of the admin performing the request
        request: Validated staff details

    Returns:
        The new auth user id

    Raises:
        StaffProvisioningError: Any step failed
    """
    logger.info(f"Creating staff member: {request.email} ({request.role}, {request.staff_id})")

    try:
        auth_user = auth.create_user(
            email=request.email,
            password=generate_password(),
            user_metadata={"full_name": request.full_name, "role": request.role},
        )
    except AuthProviderError as e:
        logger.error(f"Failed to create auth user: {e}")
        raise StaffProvisioningError(f"Failed to create user: {e}")

    logger.info(f"Auth user created: {auth_user.id}")

    try:
        db.add(Staff(
            staff_id=request.staff_id,
            user_id=auth_user.id,
            email=request.email,
            full_name=request.full_name,
            phone_number=request.phone_number,
            role=request.role,
            created_by_admin=admin_user_id,
        ))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to insert staff record: {e}")
        _rollback_auth_user(auth, auth_user.id)
        raise StaffProvisioningError(f"Failed to create staff record: {e.__class__.__name__}")

    existing_role = db.query(UserRoleAssignment).filter(
        UserRoleAssignment.user_id == auth_user.id,
        UserRoleAssignment.role == request.role,
    ).first()

    if not existing_role:
        try:
            db.add(UserRoleAssignment(user_id=auth_user.id, role=request.role, created_by=admin_user_id))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to insert user role: {e}")
            db.query(Staff).filter(Staff.user_id == auth_user.id).delete()
            db.commit()
            _rollback_auth_user(auth, auth_user.id)
            raise StaffProvisioningError(f"Failed to assign role: {e.__class__.__name__}")

    logger.info(f"Staff member {request.staff_id} provisioned")
    return auth_user.id
