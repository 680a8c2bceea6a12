"""Uptime aggregator turning raw probe logs into fixed-length bucket series."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uptime_monitor.core.exceptions import NotSupportedError
from uptime_monitor.core.registry import SiteRegistry, execute_statement
from uptime_monitor.models.log import Log
from uptime_monitor.models.website import Website
from uptime_monitor.utils.logger import get_logger
from uptime_monitor.utils.timeutils import truncate_timestamp, utcnow

logger = get_logger(__name__, component="aggregator")

HOUR = 3600
DAY = 24 * HOUR
UP_STATUS = 200


@dataclass(frozen=True)
class StatsPoint:
    """Uptime of one bucket; ``uptime_pct`` is None when nothing was logged."""
    time: datetime
    uptime_pct: Optional[int]


@dataclass(frozen=True)
class Incident:
    """A logged probe whose status was not 200."""
    time: datetime
    status_code: int


@dataclass
class SiteWithStats:
    url: str
    alias: str
    series: List[StatsPoint] = field(default_factory=list)


@dataclass
class SiteDetail:
    url: str
    alias: str
    series: List[StatsPoint] = field(default_factory=list)
    incidents: List[Incident] = field(default_factory=list)
    # Monthly aggregation is not implemented; see UptimeAggregator.get_monthly_stats
    monthly: Optional[List[StatsPoint]] = None


def uptime_percentage(up: int, total: int) -> int:
    """Integer share of successful probes, floored."""
    return 100 * up // total


def fill_data_gaps(
    points: List[StatsPoint],
    bucket_count: int,
    bucket_seconds: int,
    now: datetime
) -> List[StatsPoint]:
    """
    Expand sparse bucket data into a contiguous newest-first series.

    Walks back from the bucket containing ``now`` for ``bucket_count - 1``
    steps. Buckets present in ``points`` are kept as-is, missing ones become
    ``StatsPoint(time, None)``, and points outside the window are dropped.

    Args:
        points: Non-empty buckets, any order
        bucket_count: Length of the returned series
        bucket_seconds: Bucket width in seconds
        now: Reference time for the newest bucket

    Returns:
        list[StatsPoint]: Exactly ``bucket_count`` points, strictly decreasing in time
    """
    current = truncate_timestamp(now, bucket_seconds)
    by_time: Dict[datetime, StatsPoint] = {point.time: point for point in points}

    series = []
    for step in range(bucket_count):
        bucket = current - timedelta(seconds=bucket_seconds * step)
        series.append(by_time.get(bucket, StatsPoint(time=bucket, uptime_pct=None)))

    return series


class UptimeAggregator:
    """
    Calculator for bucketed uptime statistics and incidents.

    Provides the fixed-length series used by the site listing and the
    per-site detail view.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize uptime aggregator.

        Args:
            db: Database session
        """
        self.db = db

    async def get_recent_stats(
        self,
        alias: str,
        bucket_seconds: int = HOUR,
        bucket_count: int = 24,
        now: Optional[datetime] = None
    ) -> List[StatsPoint]:
        """
        Get the trailing uptime series for a site.

        Args:
            alias: Site alias
            bucket_seconds: Bucket width in seconds (3600 for hourly)
            bucket_count: Number of buckets to return
            now: Reference time, defaults to the current UTC time

        Returns:
            list[StatsPoint]: ``bucket_count`` points, newest first

        Example:
            ```python
            aggregator = UptimeAggregator(db)
            series = await aggregator.get_recent_stats("ex")
            print(series[0].time, series[0].uptime_pct)
            ```
        """
        if bucket_seconds < 1:
            raise ValueError("bucket_seconds must be at least 1")
        if bucket_count < 1:
            raise ValueError("bucket_count must be at least 1")

        now = now or utcnow()
        current = truncate_timestamp(now, bucket_seconds)
        window_start = current - timedelta(seconds=bucket_seconds * (bucket_count - 1))
        window_end = current + timedelta(seconds=bucket_seconds)

        points = await self._bucket_uptime(alias, bucket_seconds, window_start, window_end)
        series = fill_data_gaps(points, bucket_count, bucket_seconds, now)

        logger.debug(
            "Calculated uptime series",
            extra={
                "alias": alias,
                "bucket_seconds": bucket_seconds,
                "bucket_count": bucket_count,
                "buckets_with_data": len(points)
            }
        )

        return series

    async def _bucket_uptime(
        self,
        alias: str,
        bucket_seconds: int,
        since: datetime,
        until: datetime
    ) -> List[StatsPoint]:
        """Group the site's logs in ``[since, until)`` into ascending buckets."""
        result = await execute_statement(
            self.db,
            select(Log.created_at, Log.status)
            .join(Website, Website.id == Log.website_id)
            .where(
                Website.alias == alias,
                Log.created_at >= since,
                Log.created_at < until
            )
            .order_by(Log.created_at.asc()),
            f"query logs of '{alias}'"
        )

        totals: Dict[datetime, int] = {}
        up: Dict[datetime, int] = {}
        for created_at, status in result.all():
            bucket = truncate_timestamp(created_at, bucket_seconds)
            totals[bucket] = totals.get(bucket, 0) + 1
            if status == UP_STATUS:
                up[bucket] = up.get(bucket, 0) + 1

        return [
            StatsPoint(time=bucket, uptime_pct=uptime_percentage(up.get(bucket, 0), total))
            for bucket, total in totals.items()
        ]

    async def get_incidents(self, alias: str, limit: Optional[int] = None) -> List[Incident]:
        """
        Get logged probes with a non-200 status, newest first.

        Args:
            alias: Site alias
            limit: Maximum number of incidents to return
        """
        query = (
            select(Log.created_at, Log.status)
            .join(Website, Website.id == Log.website_id)
            .where(Website.alias == alias, Log.status != UP_STATUS)
            .order_by(Log.created_at.desc(), Log.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)

        result = await execute_statement(self.db, query, f"query incidents of '{alias}'")

        return [
            Incident(time=created_at, status_code=status)
            for created_at, status in result.all()
        ]

    async def get_monthly_stats(self, alias: str) -> List[StatsPoint]:
        """
        Monthly aggregation.

        Raises:
            NotSupportedError: Always; only trailing bucket series are implemented
        """
        raise NotSupportedError("Monthly aggregation")

    async def list_sites_with_stats(
        self,
        bucket_seconds: int = HOUR,
        bucket_count: int = 24
    ) -> List[SiteWithStats]:
        """
        Get every registered site with its trailing uptime series.

        Returns:
            list[SiteWithStats]: One entry per site, in registration order
        """
        sites = await SiteRegistry(self.db).list_sites()
        now = utcnow()

        listing = []
        for site in sites:
            series = await self.get_recent_stats(site.alias, bucket_seconds, bucket_count, now=now)
            listing.append(SiteWithStats(url=site.url, alias=site.alias, series=series))

        logger.info("Generated site listing", extra={"site_count": len(listing)})

        return listing

    async def get_site_detail(
        self,
        alias: str,
        bucket_seconds: int = HOUR,
        bucket_count: int = 24,
        incident_limit: Optional[int] = None
    ) -> SiteDetail:
        """
        Get a site with its uptime series and incident list.

        Raises:
            SiteNotFoundError: If no site uses this alias
        """
        site = await SiteRegistry(self.db).get_site(alias)

        series = await self.get_recent_stats(site.alias, bucket_seconds, bucket_count)
        incidents = await self.get_incidents(site.alias, limit=incident_limit)

        return SiteDetail(
            url=site.url,
            alias=site.alias,
            series=series,
            incidents=incidents
        )
