"""API v1 router: one route per edge function under ``/functions/v1``."""

from fastapi import APIRouter

from fusion_edge.api.v1.endpoints import (
    classes,
    devices,
    health,
    maintenance,
    notifications,
    sessions,
    staff,
    students,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(devices.router, tags=["devices"])
api_router.include_router(sessions.router, tags=["sessions"])
api_router.include_router(classes.router, tags=["classes"])
api_router.include_router(students.router, tags=["students"])
api_router.include_router(staff.router, tags=["staff"])
api_router.include_router(notifications.router, tags=["notifications"])
api_router.include_router(maintenance.router, tags=["maintenance"])
