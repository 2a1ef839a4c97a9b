"""Health check endpoints."""

from fastapi import APIRouter

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Liveness probe; does not touch the database."""
    return {"status": "ok"}
