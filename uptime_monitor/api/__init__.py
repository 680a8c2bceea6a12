"""API routers for Uptime Monitor."""
