"""Utility modules for Uptime Monitor."""

from uptime_monitor.utils.logger import get_logger, setup_logging
from uptime_monitor.utils.timeutils import truncate_timestamp, utc_isoformat, utcnow

__all__ = ["get_logger", "setup_logging", "truncate_timestamp", "utc_isoformat", "utcnow"]
