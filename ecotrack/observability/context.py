from __future__ import annotations

import uuid
from typing import Any, MutableMapping

from fastapi import Request


_STATE_KEY = "request_id"


def new_request_id() -> str:
    return str(uuid.uuid4())


def set_request_id(scope: MutableMapping[str, Any], request_id: str) -> None:
    # Starlette exposes scope["state"] as request.state.
    scope.setdefault("state", {})[_STATE_KEY] = request_id


def request_id_from_scope(scope: MutableMapping[str, Any]) -> str:
    state = scope.get("state") or {}
    return str(state.get(_STATE_KEY, ""))


def get_request_id(request: Request) -> str:
    """FastAPI dependency returning the correlation id of the current request."""

    return request_id_from_scope(request.scope)
