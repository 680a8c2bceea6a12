"""Site management API routes."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from uptime_monitor.core.aggregator import UptimeAggregator
from uptime_monitor.core.rate_limiter import limiter
from uptime_monitor.core.registry import SiteRegistry
from uptime_monitor.database.session import get_db
from uptime_monitor.schemas.stats import SiteDetailResponse, SiteListResponse, SiteStatsResponse
from uptime_monitor.schemas.website import SiteCreate, SiteResponse

router = APIRouter()


@router.get("/sites", response_model=SiteListResponse)
@limiter.limit("100/minute")
async def list_sites(request: Request, db: AsyncSession = Depends(get_db)):
    """List all sites with their trailing uptime series."""
    stats_config = request.app.state.config.stats

    listing = await UptimeAggregator(db).list_sites_with_stats(
        bucket_seconds=stats_config.bucket_seconds,
        bucket_count=stats_config.bucket_count
    )

    return SiteListResponse(
        sites=[SiteStatsResponse.model_validate(site) for site in listing],
        total=len(listing)
    )


@router.post("/sites", response_model=SiteResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("50/minute")
async def create_site(
    request: Request,
    site_data: SiteCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new site.

    Args:
        site_data: URL and alias of the site
        db: Database session
    """
    website = await SiteRegistry(db).add_site(site_data.url, site_data.alias)
    return SiteResponse.model_validate(website)


@router.get("/sites/{alias}", response_model=SiteDetailResponse)
@limiter.limit("200/minute")
async def get_site(
    request: Request,
    alias: str,
    db: AsyncSession = Depends(get_db)
):
    """
    Get a site with its uptime series and incidents.

    Args:
        alias: Site alias
        db: Database session
    """
    stats_config = request.app.state.config.stats

    detail = await UptimeAggregator(db).get_site_detail(
        alias,
        bucket_seconds=stats_config.bucket_seconds,
        bucket_count=stats_config.bucket_count,
        incident_limit=stats_config.incident_limit
    )

    return SiteDetailResponse.model_validate(detail)


@router.delete("/sites/{alias}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("20/minute")
async def delete_site(
    request: Request,
    alias: str,
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a site together with all of its logs.

    Args:
        alias: Site alias
        db: Database session
    """
    await SiteRegistry(db).delete_site(alias)
