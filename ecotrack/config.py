from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ecotrack import __version__


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", populate_by_name=True)

    service_name: str = Field(default="ecotrack-service", alias="SERVICE_NAME")
    service_version: str = Field(default=__version__, alias="SERVICE_VERSION")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    log_level: str = Field(default="info", alias="LOG_LEVEL")
    environment: str = Field(default="development", alias="ENVIRONMENT")

    request_id_header: str = Field(default="X-Request-ID", alias="REQUEST_ID_HEADER")
    max_body_size_mb: int = Field(default=10, alias="MAX_BODY_SIZE_MB")
    cors_allow_origins: str = Field(default="*", alias="CORS_ALLOW_ORIGINS")
    gzip_minimum_size: int = Field(default=1000, alias="GZIP_MINIMUM_SIZE")
    shutdown_grace_period_seconds: float = Field(default=10.0, alias="SHUTDOWN_GRACE_PERIOD_SECONDS")

    database_url: str = Field(default="", alias="DATABASE_URL")
    readiness_timeout_seconds: float = Field(default=2.0, alias="READINESS_TIMEOUT_SECONDS")
    enable_metrics_endpoint: bool = Field(default=True, alias="ENABLE_METRICS_ENDPOINT")

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    @property
    def max_body_size_bytes(self) -> int:
        return self.max_body_size_mb * 1024 * 1024

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
