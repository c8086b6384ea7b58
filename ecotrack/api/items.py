from __future__ import annotations

import json
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from ecotrack.errors import BadRequestError
from ecotrack.models.schemas import ErrorResponse, ItemCreate, ItemResponse, ItemsResponse
from ecotrack.observability.context import get_request_id


router = APIRouter(prefix="/api/v1", tags=["items"])

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = ("name", "value", "unit")
MISSING_FIELDS_MESSAGE = f"Missing required fields: {', '.join(REQUIRED_FIELDS)}"


async def read_payload(request: Request) -> dict[str, Any]:
    """Parse a JSON or URL-encoded body into a dict; other content types yield ``{}``."""

    content_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()

    if content_type == "application/json" or content_type.endswith("+json"):
        raw = await request.body()
        if not raw.strip():
            return {}
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise BadRequestError("Malformed JSON body") from exc
        if not isinstance(payload, dict):
            raise BadRequestError("Request body must be a JSON object")
        return payload

    if content_type == "application/x-www-form-urlencoded":
        form = await request.form()
        return {key: value for key, value in form.items()}

    return {}


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_item_payload(payload: dict[str, Any]) -> ItemCreate:
    if any(_is_missing(payload.get(name)) for name in REQUIRED_FIELDS):
        raise BadRequestError(MISSING_FIELDS_MESSAGE)
    try:
        return ItemCreate.model_validate({name: payload[name] for name in REQUIRED_FIELDS})
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise BadRequestError(f"Invalid fields: {', '.join(fields)}") from exc


@router.get("/items", response_model=ItemsResponse)
async def list_items(request: Request, request_id: str = Depends(get_request_id)) -> ItemsResponse:
    items = request.app.state.item_store.list()
    logger.info("items_listed", count=len(items), request_id=request_id)
    return ItemsResponse(data=items, count=len(items), request_id=request_id)


@router.post(
    "/items",
    status_code=201,
    response_model=ItemResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
)
async def create_item(
    request: Request,
    payload: dict[str, Any] = Depends(read_payload),
    request_id: str = Depends(get_request_id),
) -> ItemResponse:
    try:
        item_in = validate_item_payload(payload)
    except BadRequestError as exc:
        logger.info("item_rejected", reason=exc.message, request_id=request_id)
        raise

    item = request.app.state.item_store.create(item_in)
    request.app.state.metrics.items_created_total.inc()
    logger.info("item_created", item_id=item.id, name=item.name, unit=item.unit, request_id=request_id)
    return ItemResponse(data=item, request_id=request_id)
