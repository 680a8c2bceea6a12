"""Pydantic schemas for API request/response validation."""

from uptime_monitor.schemas.website import SiteCreate, SiteResponse
from uptime_monitor.schemas.stats import (
    HealthResponse,
    IncidentResponse,
    IncidentsResponse,
    SeriesResponse,
    SiteDetailResponse,
    SiteListResponse,
    SiteStatsResponse,
    StatsPointResponse,
)

__all__ = [
    "SiteCreate",
    "SiteResponse",
    "HealthResponse",
    "IncidentResponse",
    "IncidentsResponse",
    "SeriesResponse",
    "SiteDetailResponse",
    "SiteListResponse",
    "SiteStatsResponse",
    "StatsPointResponse",
]
