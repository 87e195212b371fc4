from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "laborportal-api"
    environment: str = "dev"
    storage_backend: Literal["local", "postgres"] = "local"
    local_store_path: str | None = None
    database_url: str | None = None
    database_pool_min_size: int = 1
    database_pool_max_size: int = 10
    laborer_passkey: str = "1234"
    seed_demo_data: bool = False
    otel_enabled: bool = True
    otel_service_name: str = "laborportal-api"
    otel_exporter_otlp_endpoint: str | None = None
    otel_exporter_otlp_headers: str | None = None
    otel_trace_sample_ratio: float = 1.0
    otel_log_correlation: bool = True

    model_config = SettingsConfigDict(env_prefix="LP_", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
