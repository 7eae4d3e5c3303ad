"""Pydantic response schemas for the public JSON API."""

from typing import Any, Optional

from pydantic import BaseModel


class WindReading(BaseModel):
    """Latest live wind reading as served by /api/wind."""
    windSpeed: str
    windDirection: str
    latestTimestamp: str
    windFrom: str


class ErrorResponse(BaseModel):
    """Error envelope; `status` and `body` only appear for bad upstream responses."""
    error: str
    details: str = ""
    status: Optional[int] = None
    body: Any = None


class HealthResponse(BaseModel):
    """Liveness probe payload."""
    status: str
    launch_strategy: str
    cache_entries: int
