"""API dependencies."""

import json
from typing import Any, Generator, Optional, Type, TypeVar

from fastapi import Depends, Header, Request
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from fusion_edge.api.errors import format_validation_errors
from fusion_edge.config import Settings
from fusion_edge.exceptions import ClientInputError
from fusion_edge.services.auth_client import AuthClient, AuthUser
from fusion_edge.services.email_service import EmailClient
from fusion_edge.services.notification_dispatcher import NotificationDispatcher
from fusion_edge.services.staff_service import authenticate_bearer, require_admin

ModelT = TypeVar("ModelT", bound=BaseModel)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Get database session."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings


async def get_raw_body(request: Request) -> bytes:
    """Raw request body, for endpoints that verify a signature over it."""
    return await request.body()


def parse_json_body(raw_body: bytes) -> Any:
    """Decode a JSON body; anything undecodable is a 400."""
    try:
        return json.loads(raw_body)
    except ValueError:
        raise ClientInputError("Invalid JSON payload")


def validate_body(model: Type[ModelT], data: Any) -> ModelT:
    """Validate decoded JSON against a schema, as a 400 on failure."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ClientInputError(format_validation_errors(e.errors()))


def get_notifier(request: Request) -> NotificationDispatcher:
    """Dispatcher bound to the app's Celery client."""
    return NotificationDispatcher(request.app.state.celery_app)


def get_auth_client(settings: Settings = Depends(get_settings)) -> AuthClient:
    return AuthClient(base_url=settings.auth_url, service_key=settings.service_role_key)


def get_email_client(settings: Settings = Depends(get_settings)) -> EmailClient:
    return EmailClient(
        api_url=settings.resend_api_url,
        api_key=settings.resend_api_key,
        sender=settings.email_from,
        timeout=settings.email_timeout_seconds,
    )


def get_current_user(
    authorization: Optional[str] = Header(None),
    auth: AuthClient = Depends(get_auth_client),
) -> AuthUser:
    """Resolve the bearer token to an auth user (401 otherwise)."""
    return authenticate_bearer(auth, authorization or "")


def get_admin_user(
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AuthUser:
    """Current user, required to hold the ADMIN role (403 otherwise)."""
    require_admin(db, user)
    return user
