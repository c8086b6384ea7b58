"""Liveness and readiness endpoints for the orchestrator.

``/health`` is liveness and must never consult a dependency. ``/ready`` is
readiness and may fail while dependencies are down or the process drains.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ecotrack.models.schemas import HealthResponse, ReadinessResponse


router = APIRouter(tags=["health"])


@router.api_route("/health", methods=["GET", "HEAD"], response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    settings = request.app.state.settings
    return HealthResponse(
        service=settings.service_name,
        timestamp=datetime.now(timezone.utc),
        version=settings.service_version,
    )


@router.api_route(
    "/ready",
    methods=["GET", "HEAD"],
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
)
async def ready(request: Request) -> ReadinessResponse | JSONResponse:
    state = request.app.state
    now = datetime.now(timezone.utc)

    if state.coordinator.draining:
        body = ReadinessResponse(status="shutting down", service=state.settings.service_name, timestamp=now)
        return JSONResponse(status_code=503, content=body.model_dump(mode="json"))

    report = await state.readiness.run()
    if not report.ready:
        body = ReadinessResponse(
            status="not ready", service=state.settings.service_name, timestamp=now, checks=report.checks
        )
        return JSONResponse(status_code=503, content=body.model_dump(mode="json"))

    return ReadinessResponse(status="ready", service=state.settings.service_name, timestamp=now, checks=report.checks)
