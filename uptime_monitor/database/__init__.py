"""Database module for Uptime Monitor."""

from uptime_monitor.database.base import Base
from uptime_monitor.database.session import get_db, engine, async_session

__all__ = ["Base", "get_db", "engine", "async_session"]
