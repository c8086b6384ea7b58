from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, Request

from ecotrack.models.schemas import StatusResponse
from ecotrack.observability.context import get_request_id


router = APIRouter(prefix="/api/v1", tags=["status"])

logger = structlog.get_logger(__name__)


@router.get("/status", response_model=StatusResponse)
async def status(request: Request, request_id: str = Depends(get_request_id)) -> StatusResponse:
    logger.info("status_requested", request_id=request_id)
    settings = request.app.state.settings
    runtime = request.app.state.runtime
    return StatusResponse(
        service=settings.service_name,
        version=settings.service_version,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc),
        uptime=runtime.uptime_seconds(),
        memory=runtime.memory(),
        pid=runtime.pid(),
        request_id=request_id,
    )
