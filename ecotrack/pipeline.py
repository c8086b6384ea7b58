"""The request pipeline, composed once at startup.

Stages are listed outermost first. Every response, including ones produced
by an inner stage (CORS preflight, 413, error envelopes), passes back out
through the stages above it, so it always carries the correlation header
and the security headers.

1. RequestContextMiddleware   correlation id, entry/access logs, metrics, in-flight count
2. SecurityHeadersMiddleware  framing, sniffing and transport hardening headers
3. CORSMiddleware             permissive cross-origin defaults
4. GZipMiddleware             response compression negotiation
5. BodySizeLimitMiddleware    413 above the configured body size
6. UnhandledErrorMiddleware   last-resort translation into the error envelope
"""

from __future__ import annotations

from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

from ecotrack.config import Settings
from ecotrack.errors import UnhandledErrorMiddleware
from ecotrack.lifecycle import ShutdownCoordinator
from ecotrack.observability.metrics import ServiceMetrics
from ecotrack.observability.middleware import (
    BodySizeLimitMiddleware,
    RequestContextMiddleware,
    SecurityHeadersMiddleware,
)


def build_pipeline(settings: Settings, metrics: ServiceMetrics, coordinator: ShutdownCoordinator) -> list[Middleware]:
    return [
        Middleware(
            RequestContextMiddleware,
            metrics=metrics,
            coordinator=coordinator,
            header_name=settings.request_id_header,
        ),
        Middleware(SecurityHeadersMiddleware),
        Middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=[settings.request_id_header],
        ),
        Middleware(GZipMiddleware, minimum_size=settings.gzip_minimum_size),
        Middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_size_bytes),
        Middleware(UnhandledErrorMiddleware, expose_errors=not settings.is_production),
    ]
