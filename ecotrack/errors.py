"""Error taxonomy and the translation of failures into the public envelope.

Handlers raise ``ApiError`` subclasses for failures they anticipate; anything
else bubbles up to ``UnhandledErrorMiddleware``. Both paths answer with
``{"success": false, "error": ..., "requestId": ...}``.
"""

from __future__ import annotations

from typing import Any, Callable

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ecotrack.models.schemas import ErrorResponse
from ecotrack.observability.context import request_id_from_scope


GENERIC_ERROR_MESSAGE = "Internal server error"
ROUTE_NOT_FOUND_MESSAGE = "Route not found"

logger = structlog.get_logger(__name__)


class ApiError(Exception):
    """A failure with a declared status code and a message safe to show callers."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(ApiError):
    status_code = 400


class PayloadTooLargeError(ApiError):
    status_code = 413


def error_response(request_id: str, message: str, status_code: int) -> JSONResponse:
    body = ErrorResponse(error=message, request_id=request_id)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(request_id_from_scope(request.scope), exc.message, exc.status_code)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    request_id = request_id_from_scope(request.scope)
    # A path or method no route accepts is reported the same way.
    if exc.status_code in (404, 405):
        logger.warning("route_not_found", method=request.method, path=request.url.path, request_id=request_id)
        return error_response(request_id, ROUTE_NOT_FOUND_MESSAGE, 404)
    return error_response(request_id, str(exc.detail), exc.status_code)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    message = f"Invalid fields: {', '.join(fields)}" if fields else "Invalid request"
    return error_response(request_id_from_scope(request.scope), message, 400)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)


class UnhandledErrorMiddleware:
    """Converts exceptions no handler claimed into the failure envelope.

    ``expose_errors`` decides whether callers see the exception text or the
    generic message; the log always carries the full traceback.
    """

    def __init__(self, app: Callable[..., Any], expose_errors: bool = True) -> None:
        self.app = app
        self.expose_errors = expose_errors

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal response_started
            if message.get("type") == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            request_id = request_id_from_scope(scope)
            logger.exception("unhandled_error", error=str(exc), request_id=request_id)
            if response_started:
                raise

            status_code = getattr(exc, "status_code", None)
            if not isinstance(status_code, int) or not 400 <= status_code <= 599:
                status_code = 500
            message = str(exc) or GENERIC_ERROR_MESSAGE
            if not self.expose_errors:
                message = GENERIC_ERROR_MESSAGE

            response = error_response(request_id, message, status_code)
            await response(scope, receive, send)
