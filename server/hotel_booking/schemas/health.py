"""Schemas for the RPC health ping."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"


class HealthResponse(BaseModel):
    """Ping result; ``degraded`` when the booking database cannot be queried."""

    status: HealthStatus
    service: str = Field("hotel-booking-api")
    database: str = Field(..., description="ok or unavailable")
    timestamp: datetime = Field(..., description="Server time, naive UTC")
    version: str = Field("1.0.0", description="API version")
