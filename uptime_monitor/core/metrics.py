"""Prometheus metrics collection for the uptime prober."""

from typing import Optional

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST
)

from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)

__all__ = ["MetricsCollector", "metrics_collector", "CONTENT_TYPE_LATEST"]


class MetricsCollector:
    """Prometheus metrics collector for Uptime Monitor."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize metrics collector.

        Args:
            registry: Optional custom registry
        """
        self.registry = registry or CollectorRegistry()
        self._setup_metrics()
        logger.info("Prometheus metrics collector initialized")

    def _setup_metrics(self) -> None:
        """Setup all Prometheus metrics."""

        # Probe Metrics
        self.probes_total = Counter(
            'uptime_monitor_probes_total',
            'Total number of probes performed',
            ['alias', 'outcome'],
            registry=self.registry
        )

        self.probe_duration = Histogram(
            'uptime_monitor_probe_duration_seconds',
            'Probe duration in seconds',
            ['alias'],
            registry=self.registry
        )

        self.site_last_status = Gauge(
            'uptime_monitor_site_last_status_code',
            'HTTP status code returned by the last probe',
            ['alias'],
            registry=self.registry
        )

        # Log Store Metrics
        self.log_writes_total = Counter(
            'uptime_monitor_log_writes_total',
            'Probe results written to the log store',
            ['outcome'],
            registry=self.registry
        )

        # Prober Loop Metrics
        self.prober_ticks_total = Counter(
            'uptime_monitor_prober_ticks_total',
            'Completed prober ticks',
            registry=self.registry
        )

        self.prober_tick_duration = Histogram(
            'uptime_monitor_prober_tick_duration_seconds',
            'Duration of one pass over all registered sites',
            registry=self.registry
        )

        self.prober_halted = Gauge(
            'uptime_monitor_prober_halted',
            'Whether the prober loop stopped on a fatal error (1=halted)',
            registry=self.registry
        )

        self.registered_sites = Gauge(
            'uptime_monitor_registered_sites',
            'Number of sites seen by the last prober tick',
            registry=self.registry
        )

    def record_probe(self, alias: str, outcome: str, duration: float, status_code: Optional[int] = None) -> None:
        """
        Record a single probe.

        Args:
            alias: Site alias
            outcome: "response" when any HTTP response arrived, "error" otherwise
            duration: Probe duration in seconds
            status_code: HTTP status of the response, if any
        """
        self.probes_total.labels(alias=alias, outcome=outcome).inc()
        self.probe_duration.labels(alias=alias).observe(duration)

        if status_code is not None:
            self.site_last_status.labels(alias=alias).set(status_code)

    def record_log_write(self, outcome: str) -> None:
        """Record a log store insert ("success" or "failure")."""
        self.log_writes_total.labels(outcome=outcome).inc()

    def record_tick(self, site_count: int, duration: float) -> None:
        """
        Record a completed prober tick.

        Args:
            site_count: Number of sites in the tick's snapshot
            duration: Tick duration in seconds
        """
        self.prober_ticks_total.inc()
        self.prober_tick_duration.observe(duration)
        self.registered_sites.set(site_count)

    def set_prober_halted(self, halted: bool) -> None:
        """Flag the prober loop as halted or running."""
        self.prober_halted.set(1 if halted else 0)

    def generate_metrics(self) -> bytes:
        """
        Generate Prometheus metrics output.

        Returns:
            bytes: Prometheus metrics in text format
        """
        return generate_latest(self.registry)


# Global metrics collector instance
metrics_collector = MetricsCollector()
