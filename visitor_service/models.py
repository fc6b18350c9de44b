"""
Pydantic models for the visitor service HTTP responses.

Field names are camelCase to keep the JSON shape cron dashboards read.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RunAcceptedResponse(BaseModel):
    """Response after a trigger was accepted or rejected by the busy guard."""

    ok: bool = True
    accepted: bool
    url: Optional[str] = Field(None, description="Target URL of the started session")
    stayMinutes: Optional[float] = Field(None, description="Stay duration of the started session")
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error payload for rejected triggers."""

    ok: bool = False
    error: str


class StatusResponse(BaseModel):
    """Snapshot of the run state plus the configured stay duration."""

    running: bool
    lastRunAt: Optional[datetime] = None
    lastFinishedAt: Optional[datetime] = None
    lastUrl: Optional[str] = None
    lastError: Optional[str] = None
    stayMinutes: float
