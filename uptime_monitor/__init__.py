"""Uptime Monitor - periodic website probes and bucketed uptime statistics."""

__version__ = "1.0.0"
