from __future__ import annotations

from time import perf_counter
from typing import Any, Callable

import structlog
from starlette.datastructures import Headers, MutableHeaders

from ecotrack.errors import PayloadTooLargeError, error_response
from ecotrack.lifecycle import ShutdownCoordinator
from ecotrack.observability.context import new_request_id, request_id_from_scope, set_request_id
from ecotrack.observability.metrics import ServiceMetrics


class RequestContextMiddleware:
    """Assigns the correlation id, writes access logs, and records HTTP metrics."""

    def __init__(
        self,
        app: Callable[..., Any],
        metrics: ServiceMetrics | None = None,
        coordinator: ShutdownCoordinator | None = None,
        header_name: str = "X-Request-ID",
    ) -> None:
        self.app = app
        self.metrics = metrics
        self.coordinator = coordinator
        self.header_name = header_name
        # Avoid self-observing the observability endpoint.
        self._excluded_metric_paths = {"/metrics"}

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_headers = Headers(scope=scope)
        request_id = request_headers.get(self.header_name) or new_request_id()
        set_request_id(scope, request_id)
        path = scope.get("path")
        method = scope.get("method")

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=path,
            method=method,
        )
        access_logger = structlog.get_logger("access")
        access_logger.info(
            "incoming_request",
            method=method,
            path=path,
            user_agent=request_headers.get("user-agent"),
            request_id=request_id,
        )

        start = perf_counter()
        status_code: int = 500

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code

            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))
                headers = MutableHeaders(scope=message)
                headers[self.header_name] = request_id

            await send(message)

        observed = self.metrics is not None and path not in self._excluded_metric_paths
        if observed:
            self.metrics.http_requests_in_progress.labels(method=method).inc()
        if self.coordinator is not None:
            self.coordinator.request_started()

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed = perf_counter() - start
            if self.coordinator is not None:
                self.coordinator.request_finished()

            # Update metrics first so they update even if logging misbehaves.
            if observed:
                self.metrics.http_requests_in_progress.labels(method=method).dec()
                self.metrics.observe_http_request(
                    method=method,
                    path=_route_label(scope),
                    status_code=status_code,
                    elapsed_seconds=elapsed,
                )

            access_logger.info(
                "http_request",
                status_code=status_code,
                elapsed_ms=round(elapsed * 1000.0, 2),
            )

            structlog.contextvars.clear_contextvars()


def _route_label(scope: dict[str, Any]) -> str:
    # Label by route template; anything answered before routing (404, 413,
    # CORS preflight) shares one label so client-chosen paths add no series.
    route_path = getattr(scope.get("route"), "path", None)
    return route_path or "unmatched"


_SECURITY_HEADERS: dict[str, str] = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Content-Security-Policy": (
        "default-src 'self'; "
        "base-uri 'self'; "
        "frame-ancestors 'none'; "
        "object-src 'none'; "
        "img-src 'self' data:; "
        "style-src 'self' https: 'unsafe-inline'"
    ),
}


class SecurityHeadersMiddleware:
    """Adds hardening headers to every HTTP response."""

    def __init__(self, app: Callable[..., Any], headers: dict[str, str] | None = None) -> None:
        self.app = app
        self.headers = dict(_SECURITY_HEADERS if headers is None else headers)

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        async def send_wrapper(message: dict[str, Any]) -> None:
            if message.get("type") == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in self.headers.items():
                    headers.setdefault(name, value)
            await send(message)

        await self.app(scope, receive, send_wrapper)


class BodySizeLimitMiddleware:
    """Rejects request bodies larger than ``max_bytes`` with 413.

    A declared Content-Length over the limit is refused before the handler
    runs; a streamed body is counted as it is read.
    """

    def __init__(self, app: Callable[..., Any], max_bytes: int = 10 * 1024 * 1024) -> None:
        self.app = app
        self.max_bytes = max_bytes

    def _too_large_message(self) -> str:
        return f"Request body exceeds the {self.max_bytes} byte limit"

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.max_bytes:
            structlog.get_logger(__name__).warning(
                "request_body_too_large", content_length=int(declared), limit_bytes=self.max_bytes
            )
            response = error_response(request_id_from_scope(scope), self._too_large_message(), 413)
            await response(scope, receive, send)
            return

        received = 0

        async def receive_wrapper() -> dict[str, Any]:
            nonlocal received
            message = await receive()
            if message.get("type") == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    structlog.get_logger(__name__).warning(
                        "request_body_too_large", received_bytes=received, limit_bytes=self.max_bytes
                    )
                    raise PayloadTooLargeError(self._too_large_message())
            return message

        await self.app(scope, receive_wrapper, send)

