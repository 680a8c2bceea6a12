"""Pydantic schemas for uptime statistics endpoints.

All timestamps are UTC and serialized with an explicit ``+00:00`` offset.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_serializer

from uptime_monitor.utils.timeutils import utc_isoformat


class StatsPointResponse(BaseModel):
    """One bucket of an uptime series; ``time`` is the bucket start in UTC."""
    time: datetime
    uptime_pct: Optional[int] = Field(default=None, ge=0, le=100)

    model_config = {"from_attributes": True}

    @field_serializer('time')
    def serialize_time(self, value: datetime) -> str:
        return utc_isoformat(value)


class IncidentResponse(BaseModel):
    """A probe result with a non-200 status."""
    time: datetime
    status_code: int

    model_config = {"from_attributes": True}

    @field_serializer('time')
    def serialize_time(self, value: datetime) -> str:
        return utc_isoformat(value)


class SiteStatsResponse(BaseModel):
    """Site with its trailing uptime series."""
    url: str
    alias: str
    series: List[StatsPointResponse]

    model_config = {"from_attributes": True}


class SiteListResponse(BaseModel):
    """Schema for the site listing."""
    sites: List[SiteStatsResponse]
    total: int


class SeriesResponse(BaseModel):
    """Schema for a standalone uptime series."""
    alias: str
    bucket_seconds: int
    bucket_count: int
    series: List[StatsPointResponse]


class IncidentsResponse(BaseModel):
    """Schema for the incident listing of one site."""
    alias: str
    incidents: List[IncidentResponse]
    total: int


class SiteDetailResponse(BaseModel):
    """Schema for the per-site detail view."""
    url: str
    alias: str
    series: List[StatsPointResponse]
    incidents: List[IncidentResponse]
    monthly: Optional[List[StatsPointResponse]] = None

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    """Schema for health check response."""
    status: str = Field(default="healthy")
    version: str
    timestamp: str
    prober: str = Field(default="running")
    prober_error: Optional[str] = None
    last_tick_at: Optional[datetime] = None

    @field_serializer('last_tick_at')
    def serialize_last_tick_at(self, value: Optional[datetime]) -> Optional[str]:
        return utc_isoformat(value) if value is not None else None
