"""Core business logic modules for Uptime Monitor."""

from uptime_monitor.core.aggregator import UptimeAggregator
from uptime_monitor.core.prober import Prober
from uptime_monitor.core.registry import SiteRegistry

__all__ = ["Prober", "SiteRegistry", "UptimeAggregator"]
