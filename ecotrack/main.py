from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from ecotrack.api.health import router as health_router
from ecotrack.api.items import router as items_router
from ecotrack.api.metrics import router as metrics_router
from ecotrack.api.status import router as status_router
from ecotrack.config import Settings, get_settings
from ecotrack.errors import register_exception_handlers
from ecotrack.lifecycle import ShutdownCoordinator
from ecotrack.observability.logging import configure_logging
from ecotrack.observability.metrics import ServiceMetrics
from ecotrack.pipeline import build_pipeline
from ecotrack.runtime import ProcessRuntimeInfo, RuntimeInfo
from ecotrack.services.item_store import ItemStore, seeded_store
from ecotrack.services.readiness import ReadinessChecker, build_readiness_checker


logger = structlog.get_logger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    configure_logging(settings.log_level)
    logger.info(
        "service_started",
        service=settings.service_name,
        version=settings.service_version,
        environment=settings.environment,
        port=settings.port,
    )
    yield
    coordinator: ShutdownCoordinator = app.state.coordinator
    coordinator.begin_drain()
    drained = await coordinator.wait_for_drain()
    logger.info("shutdown_complete", drained=drained, in_flight=coordinator.in_flight)


def create_app(
    settings: Settings | None = None,
    *,
    runtime: RuntimeInfo | None = None,
    item_store: ItemStore | None = None,
    metrics: ServiceMetrics | None = None,
    readiness: ReadinessChecker | None = None,
    coordinator: ShutdownCoordinator | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    metrics = metrics or ServiceMetrics()
    coordinator = coordinator or ShutdownCoordinator(grace_period=settings.shutdown_grace_period_seconds)

    app = FastAPI(
        title="EcoTrack Service",
        version=settings.service_version,
        lifespan=_lifespan,
        middleware=build_pipeline(settings, metrics, coordinator),
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
        openapi_url=None if settings.is_production else "/openapi.json",
    )
    app.state.settings = settings
    app.state.metrics = metrics
    app.state.coordinator = coordinator
    app.state.runtime = runtime or ProcessRuntimeInfo()
    app.state.item_store = item_store if item_store is not None else seeded_store()
    app.state.readiness = readiness or build_readiness_checker(settings)

    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(status_router)
    app.include_router(items_router)
    return app


app = create_app()
