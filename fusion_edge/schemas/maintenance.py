"""Maintenance job schemas."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class BackgroundJobsResponse(BaseModel):
    """Summary of an on-demand maintenance run."""

    success: bool = True
    timestamp: str
    jobs_run: List[str]
    results: Dict[str, Any] = Field(default_factory=dict)
