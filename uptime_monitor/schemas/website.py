"""Pydantic schemas for site registration."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_serializer

from uptime_monitor.utils.timeutils import utc_isoformat


class SiteCreate(BaseModel):
    """
    Schema for registering a site.

    URL syntax is checked by SiteRegistry so that malformed input is reported
    as a site validation error rather than a schema error.
    """
    url: str = Field(..., description="Absolute URL to probe")
    alias: str = Field(..., description="Unique identifier used in URLs")


class SiteResponse(BaseModel):
    """Schema for a registered site."""
    url: str
    alias: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_serializer('created_at')
    def serialize_created_at(self, value: Optional[datetime]) -> Optional[str]:
        return utc_isoformat(value) if value is not None else None
