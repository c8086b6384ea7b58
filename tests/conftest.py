from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from ecotrack.config import Settings, get_settings
from ecotrack.main import create_app
from ecotrack.models.schemas import MemoryUsage


class FakeRuntimeInfo:
    def uptime_seconds(self) -> float:
        return 42.5

    def memory(self) -> MemoryUsage:
        return MemoryUsage(rss=1024, vms=2048)

    def pid(self) -> int:
        return 4242


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ENVIRONMENT", "SERVICE_VERSION", "DATABASE_URL", "REQUEST_ID_HEADER", "ENABLE_METRICS_ENDPOINT", "MAX_BODY_SIZE_MB"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        service_name="test-service",
        service_version="9.9.9",
        environment="test",
        database_url="",
    )


@pytest.fixture
def app_factory(settings: Settings) -> Callable[..., FastAPI]:
    def _factory(settings_overrides: dict[str, Any] | None = None, **kwargs: Any) -> FastAPI:
        app_settings = settings.model_copy(update=settings_overrides or {})
        kwargs.setdefault("runtime", FakeRuntimeInfo())
        return create_app(app_settings, **kwargs)

    return _factory


@pytest.fixture
def app(app_factory: Callable[..., FastAPI]) -> FastAPI:
    return app_factory()


@pytest.fixture
def client_for() -> Callable[[FastAPI], AsyncClient]:
    def _client(app: FastAPI) -> AsyncClient:
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    return _client


@pytest.fixture
async def api_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
