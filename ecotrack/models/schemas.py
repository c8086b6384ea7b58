from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Item(BaseModel):
    id: int
    name: str
    value: float
    unit: str
    created: datetime


class ItemCreate(BaseModel):
    name: str = Field(min_length=1)
    value: float = Field(allow_inf_nan=False)
    unit: str = Field(min_length=1)


class _Envelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    request_id: str = Field(alias="requestId")


class ItemsResponse(_Envelope):
    success: Literal[True] = True
    data: list[Item]
    count: int


class ItemResponse(_Envelope):
    success: Literal[True] = True
    data: Item


class ErrorResponse(_Envelope):
    success: Literal[False] = False
    error: str


class HealthResponse(BaseModel):
    status: Literal["healthy"] = "healthy"
    service: str
    timestamp: datetime
    version: str


class ReadinessResponse(BaseModel):
    status: Literal["ready", "not ready", "shutting down"]
    service: str
    timestamp: datetime
    checks: dict[str, str] = Field(default_factory=dict)


class MemoryUsage(BaseModel):
    rss: int
    vms: int


class StatusResponse(_Envelope):
    service: str
    version: str
    environment: str
    timestamp: datetime
    uptime: float
    memory: MemoryUsage
    pid: int
