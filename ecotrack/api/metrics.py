from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, Response


router = APIRouter(tags=["metrics"])


@router.get("/metrics", response_class=Response)
async def metrics(request: Request) -> Response:
    settings = request.app.state.settings
    if not settings.enable_metrics_endpoint:
        raise HTTPException(status_code=404, detail="Not found")
    service_metrics = request.app.state.metrics
    return Response(content=service_metrics.render(), media_type=service_metrics.content_type)
