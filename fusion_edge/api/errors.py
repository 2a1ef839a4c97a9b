"""Exception handlers rendering every failure as ``{"error": message}``."""

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fusion_edge.exceptions import FusionError

logger = logging.getLogger(__name__)


def _field_name(loc) -> str:
    parts = [str(part) for part in loc if part != "body"]
    return ".".join(parts)


def format_validation_error(error: Dict[str, Any]) -> str:
    """One pydantic error as a short, readable message."""
    error_type = error.get("type", "")
    field = _field_name(error.get("loc", ()))

    if error_type == "json_invalid":
        return "Invalid JSON payload"
    if error_type == "missing":
        return f"{field} is required" if field else "Request body is required"
    if error_type == "string_too_short" and error.get("ctx", {}).get("min_length") == 1:
        return f"{field} is required"
    if error_type == "extra_forbidden":
        return f"Unexpected field: {field}"
    if not field:
        return f"Invalid request body: {error.get('msg', 'invalid value')}"
    return f"{field}: {error.get('msg', 'invalid value')}"


def format_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """First validation error; callers fix one field at a time."""
    if not errors:
        return "Invalid request body"
    return format_validation_error(errors[0])


async def fusion_error_handler(request: Request, exc: FusionError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = format_validation_errors(exc.errors())
    logger.info(f"Rejected {request.url.path}: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on the app."""
    app.add_exception_handler(FusionError, fusion_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
