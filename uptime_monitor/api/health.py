"""Health check and metrics endpoints."""

from fastapi import APIRouter, Request, Response

from uptime_monitor import __version__
from uptime_monitor.core.metrics import CONTENT_TYPE_LATEST
from uptime_monitor.schemas.stats import HealthResponse
from uptime_monitor.utils.timeutils import utc_isoformat, utcnow

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Health check endpoint.

    Reports the prober loop state; a halted prober marks the service degraded.
    """
    prober = getattr(request.app.state, "prober", None)

    if prober is None:
        return HealthResponse(
            status="healthy",
            version=__version__,
            timestamp=utc_isoformat(utcnow()),
            prober="stopped"
        )

    return HealthResponse(
        status="degraded" if prober.state == "failed" else "healthy",
        version=__version__,
        timestamp=utc_isoformat(utcnow()),
        prober=prober.state,
        prober_error=str(prober.fatal_error) if prober.fatal_error else None,
        last_tick_at=prober.last_tick_at
    )


async def metrics(request: Request) -> Response:
    """Prometheus metrics in text exposition format; mounted when enabled."""
    collector = request.app.state.metrics
    return Response(content=collector.generate_metrics(), media_type=CONTENT_TYPE_LATEST)
