import logging

from ecotrack import __version__
from ecotrack.config import Settings, get_settings
from ecotrack.observability.logging import _resolve_level


def test_defaults() -> None:
    settings = Settings(_env_file=None)
    assert settings.service_name == "ecotrack-service"
    assert settings.port == 3000
    assert settings.request_id_header == "X-Request-ID"
    assert settings.max_body_size_bytes == 10 * 1024 * 1024
    assert settings.is_production is False
    assert settings.cors_origins == ["*"]


def test_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("SERVICE_NAME", "carbon-api")
    monkeypatch.setenv("PORT", "8081")
    monkeypatch.setenv("ENVIRONMENT", "Production")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.example, https://b.example")
    monkeypatch.setenv("SHUTDOWN_GRACE_PERIOD_SECONDS", "25")

    settings = get_settings()
    assert settings.service_name == "carbon-api"
    assert settings.port == 8081
    assert settings.is_production is True
    assert settings.cors_origins == ["https://a.example", "https://b.example"]
    assert settings.shutdown_grace_period_seconds == 25.0


def test_service_version_defaults_to_package_version() -> None:
    assert Settings(_env_file=None).service_version == __version__


def test_log_level_names_are_resolved() -> None:
    assert _resolve_level("warning") == logging.WARNING
    assert _resolve_level(" DEBUG ") == logging.DEBUG
    assert _resolve_level("chatty") == logging.INFO
    assert _resolve_level(logging.ERROR) == logging.ERROR
