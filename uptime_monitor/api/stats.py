"""Statistics API routes."""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from uptime_monitor.core.aggregator import UptimeAggregator
from uptime_monitor.core.rate_limiter import limiter
from uptime_monitor.core.registry import SiteRegistry
from uptime_monitor.database.session import get_db
from uptime_monitor.schemas.stats import (
    IncidentResponse,
    IncidentsResponse,
    SeriesResponse,
    StatsPointResponse,
)
from uptime_monitor.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/sites/{alias}/stats", response_model=SeriesResponse)
@limiter.limit("200/minute")
async def get_site_stats(
    request: Request,
    alias: str,
    bucket_seconds: int = Query(default=3600, ge=60, le=31 * 86400),
    bucket_count: int = Query(default=24, ge=1, le=1000),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the trailing uptime series of a site.

    Args:
        alias: Site alias
        bucket_seconds: Bucket width in seconds
        bucket_count: Number of buckets
        db: Database session
    """
    await SiteRegistry(db).get_site(alias)

    series = await UptimeAggregator(db).get_recent_stats(alias, bucket_seconds, bucket_count)

    logger.info(
        "Retrieved uptime series",
        extra={
            "alias": alias,
            "bucket_seconds": bucket_seconds,
            "bucket_count": bucket_count
        }
    )

    return SeriesResponse(
        alias=alias,
        bucket_seconds=bucket_seconds,
        bucket_count=bucket_count,
        series=[StatsPointResponse.model_validate(point) for point in series]
    )


@router.get("/sites/{alias}/incidents", response_model=IncidentsResponse)
@limiter.limit("100/minute")
async def get_site_incidents(
    request: Request,
    alias: str,
    limit: int = Query(default=100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db)
):
    """
    Get non-200 probe results of a site, newest first.

    Args:
        alias: Site alias
        limit: Maximum number of incidents
        db: Database session
    """
    await SiteRegistry(db).get_site(alias)

    incidents = await UptimeAggregator(db).get_incidents(alias, limit=limit)

    return IncidentsResponse(
        alias=alias,
        incidents=[IncidentResponse.model_validate(incident) for incident in incidents],
        total=len(incidents)
    )


@router.get("/sites/{alias}/stats/monthly", response_model=SeriesResponse)
@limiter.limit("100/minute")
async def get_site_monthly_stats(
    request: Request,
    alias: str,
    db: AsyncSession = Depends(get_db)
):
    """Monthly uptime series; answers 501 until monthly aggregation exists."""
    await SiteRegistry(db).get_site(alias)
    await UptimeAggregator(db).get_monthly_stats(alias)
