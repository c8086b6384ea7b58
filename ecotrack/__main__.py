from __future__ import annotations

import argparse
import math

import uvicorn

from ecotrack.config import Settings, get_settings
from ecotrack.lifecycle import GracefulServer, ShutdownCoordinator
from ecotrack.main import create_app
from ecotrack.observability.logging import configure_logging


def build_server(settings: Settings) -> GracefulServer:
    coordinator = ShutdownCoordinator(grace_period=settings.shutdown_grace_period_seconds)
    app = create_app(settings, coordinator=coordinator)

    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
        log_level=settings.log_level.lower(),
        # uvicorn takes whole seconds; round up so the drain is never shorter than configured.
        timeout_graceful_shutdown=max(1, math.ceil(settings.shutdown_grace_period_seconds)),
    )
    return GracefulServer(config, coordinator)


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="EcoTrack microservice")
    parser.add_argument("--host", default=settings.host, help="Interface to bind")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to listen on")
    args = parser.parse_args()

    settings = settings.model_copy(update={"host": args.host, "port": args.port})
    configure_logging(settings.log_level)
    build_server(settings).run()


if __name__ == "__main__":
    main()
