"""Health check endpoint."""
from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter

from aimapper.cli.run import VERSION
from aimapper.parser.document import parse_html
from app.api.models.responses import HealthResponse
from app.api.services.job_queue import job_queue

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check API health and service status.",
)
async def health_check() -> HealthResponse:
    """Return API health status."""
    checks: dict[str, bool] = {
        "parser": parse_html("<p>ok</p>").p is not None,
        "job_queue": job_queue.is_running,
    }
    overall_status = "healthy" if all(checks.values()) else "degraded"

    return HealthResponse(
        status=overall_status,
        version=VERSION,
        timestamp=datetime.now(UTC),
        checks=checks,
    )
