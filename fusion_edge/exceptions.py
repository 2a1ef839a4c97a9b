"""Service exceptions.

Exception hierarchy:
    FusionError (base, 500)
    ├── ClientInputError  - missing/invalid fields, bad JSON, bad enum (400)
    ├── AuthError         - bad bearer token or device signature (401)
    ├── ForbiddenError    - authenticated but not allowed (403)
    ├── NotFoundError     - device, session, student, ... not found (404)
    └── DependencyError   - database or upstream provider failure (500)

Endpoints let these propagate; the handler registered in ``main`` renders
them as ``{"error": message}`` with the class status code.
"""

from typing import Any, Dict, Optional

from fastapi import status


class FusionError(Exception):
    """Base exception for all service errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ClientInputError(FusionError):
    """Request body or headers are missing or invalid."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(FusionError):
    """Caller could not be authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(FusionError):
    """Caller is authenticated but lacks the required role."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(FusionError):
    """Referenced row does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class DependencyError(FusionError):
    """Database or upstream provider call failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
