"""Prober loop: periodic HTTP GET of every registered site, using APScheduler."""

import asyncio
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

import aiohttp
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import async_sessionmaker

from uptime_monitor.config import MonitoringConfig
from uptime_monitor.core.exceptions import ProbeError, StorageError
from uptime_monitor.core.metrics import MetricsCollector
from uptime_monitor.core.registry import SiteRegistry
from uptime_monitor.models.website import Website
from uptime_monitor.utils.logger import get_logger
from uptime_monitor.utils.timeutils import utcnow

logger = get_logger(__name__, component="prober")


class ProbeResult:
    """Result of one probe that received an HTTP response."""

    def __init__(
        self,
        alias: str,
        url: str,
        status_code: int,
        response_time: float
    ):
        """
        Initialize probe result.

        Args:
            alias: Alias of the probed site
            url: URL that was requested
            status_code: HTTP status code of the response
            response_time: Response time in seconds
        """
        self.alias = alias
        self.url = url
        self.status_code = status_code
        self.response_time = response_time
        self.checked_at = utcnow()

    def __repr__(self) -> str:
        """String representation of probe result."""
        return (
            f"<ProbeResult(alias='{self.alias}', "
            f"status_code={self.status_code}, "
            f"response_time={self.response_time})>"
        )


class Prober:
    """
    Background loop probing every registered site on a fixed interval.

    The first tick runs one full interval after ``start()``. Each tick takes
    a snapshot of the registry, sends one GET per site and appends one log
    row per response. With ``halt_on_error`` any probe or storage failure
    stops the loop for good; otherwise the failing site is skipped until the
    next tick.
    """

    JOB_ID = "probe_all_sites"

    def __init__(
        self,
        session_factory: async_sessionmaker,
        config: MonitoringConfig,
        metrics: Optional[MetricsCollector] = None
    ):
        """
        Initialize prober.

        Args:
            session_factory: Factory for database sessions
            config: Monitoring settings (interval, timeout, error policy)
            metrics: Optional metrics collector
        """
        self.session_factory = session_factory
        self.probe_interval = config.probe_interval
        self.request_timeout = config.request_timeout
        self.halt_on_error = config.halt_on_error
        self.metrics = metrics
        self.session: Optional[aiohttp.ClientSession] = None
        self.scheduler = AsyncIOScheduler()
        self.fatal_error: Optional[BaseException] = None
        self.last_tick_at: Optional[datetime] = None
        self.ticks = 0
        self.stopping = False

        logger.info(
            "Prober initialized",
            extra={
                "probe_interval": self.probe_interval,
                "request_timeout": self.request_timeout,
                "halt_on_error": self.halt_on_error
            }
        )

    @property
    def state(self) -> str:
        """Loop state: "failed", "running" or "stopped"."""
        if self.fatal_error is not None:
            return "failed"
        if self.scheduler.running:
            return "running"
        return "stopped"

    async def open_session(self) -> None:
        """Start the HTTP session."""
        if self.session is None:
            self.session = aiohttp.ClientSession()
            logger.info("HTTP session started")

    async def close_session(self) -> None:
        """Close the HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None
            logger.info("HTTP session closed")

    async def start(self) -> None:
        """Schedule the probe job and start the scheduler."""
        self.stopping = False
        await self.open_session()

        self.scheduler.add_job(
            self._tick,
            trigger=IntervalTrigger(seconds=self.probe_interval),
            id=self.JOB_ID,
            name="Probe all sites",
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        self.scheduler.start()

        logger.info(
            "Prober started",
            extra={"probe_interval": self.probe_interval}
        )

    async def stop(self) -> None:
        """Stop the scheduler and cleanup resources."""
        logger.info("Stopping prober")
        self.stopping = True

        if self.scheduler.get_job(self.JOB_ID) is not None:
            self.scheduler.remove_job(self.JOB_ID)

        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

        await self.close_session()

        logger.info("Prober stopped")

    async def _tick(self) -> None:
        """Scheduled job body: one probe pass plus the error policy."""
        try:
            await self.probe_once()
        except Exception as e:
            if self.stopping:
                # The HTTP session is closed under a tick that outlived stop()
                logger.info(
                    "Probe tick interrupted by shutdown",
                    extra={"error": str(e)}
                )
            elif self.halt_on_error:
                self._halt(e)
            else:
                logger.exception(
                    "Probe tick failed",
                    extra={"error": str(e)}
                )

    def _halt(self, error: BaseException) -> None:
        """Stop the loop permanently after a fatal error."""
        self.fatal_error = error

        logger.critical(
            "Prober halted on fatal error",
            extra={"error": str(error), "error_type": error.__class__.__name__},
            exc_info=error
        )

        if self.metrics:
            self.metrics.set_prober_halted(True)

        # Removing the job ends the loop without cancelling the running tick
        if self.scheduler.get_job(self.JOB_ID) is not None:
            self.scheduler.remove_job(self.JOB_ID)

    async def probe_site(self, site: Website) -> ProbeResult:
        """
        Send one GET to a site.

        Args:
            site: Site to probe

        Returns:
            ProbeResult: Status of any HTTP response, 2xx or not

        Raises:
            ProbeError: If no response was received
        """
        if self.session is None:
            await self.open_session()

        kwargs: Dict[str, Any] = {}
        if self.request_timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=self.request_timeout)

        start_time = time.monotonic()

        try:
            async with self.session.get(site.url, **kwargs) as response:
                # Drain the body so the connection can be reused
                await response.read()
                status_code = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            response_time = time.monotonic() - start_time
            reason = str(e) or e.__class__.__name__

            if self.metrics:
                self.metrics.record_probe(site.alias, "error", response_time)

            logger.warning(
                "Probe failed",
                extra={
                    "alias": site.alias,
                    "url": site.url,
                    "error": reason,
                    "response_time": response_time
                }
            )
            raise ProbeError(site.url, reason) from e

        response_time = time.monotonic() - start_time

        if self.metrics:
            self.metrics.record_probe(site.alias, "response", response_time, status_code)

        logger.debug(
            "Probe completed",
            extra={
                "alias": site.alias,
                "status_code": status_code,
                "response_time": response_time
            }
        )

        return ProbeResult(
            alias=site.alias,
            url=site.url,
            status_code=status_code,
            response_time=response_time
        )

    async def check_and_record(self, site: Website) -> ProbeResult:
        """
        Probe a site and append its status to the log store.

        Raises:
            ProbeError: If the request failed; nothing is written
            StorageError: If the insert failed (e.g. the site was deleted)
        """
        result = await self.probe_site(site)

        async with self.session_factory() as db:
            try:
                await SiteRegistry(db).append_log(site.alias, result.status_code)
            except StorageError:
                if self.metrics:
                    self.metrics.record_log_write("failure")
                raise

        if self.metrics:
            self.metrics.record_log_write("success")

        return result

    async def probe_once(self) -> List[ProbeResult]:
        """
        Run one tick: probe every site in the current registry snapshot.

        Returns:
            list[ProbeResult]: Results that were written to the log store

        Raises:
            ProbeError: First probe failure, only when ``halt_on_error`` is set
            StorageError: First storage failure, only when ``halt_on_error`` is
                set (a failing registry read is always raised)
        """
        start_time = time.monotonic()

        async with self.session_factory() as db:
            sites = await SiteRegistry(db).list_sites()

        results = []
        failures = 0

        for site in sites:
            if self.stopping:
                break
            try:
                results.append(await self.check_and_record(site))
            except (ProbeError, StorageError) as e:
                if self.halt_on_error:
                    raise
                failures += 1
                logger.error(
                    "Skipping site for this tick",
                    extra={
                        "alias": site.alias,
                        "error": str(e),
                        "error_type": e.__class__.__name__
                    }
                )

        duration = time.monotonic() - start_time
        self.ticks += 1
        self.last_tick_at = utcnow()

        if self.metrics:
            self.metrics.record_tick(len(sites), duration)

        logger.info(
            "Probe tick completed",
            extra={
                "sites": len(sites),
                "recorded": len(results),
                "failed": failures,
                "duration": duration
            }
        )

        return results
