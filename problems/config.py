"""Service configuration — data store, analytics limits and telemetry knobs."""

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class Settings(BaseSettings):
    model_config = {"env_prefix": "PROBLEMS_"}

    # Document store
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "dynatrace"
    mongodb_collection: str = "problems"
    server_selection_timeout_ms: int = 5000
    create_indexes: bool = True

    # Query tuning
    analytics_max_records: int = 10000
    default_page_size: int = 10
    max_page_size: int = 100

    # HTTP
    cors_origins: str = "*"
    host: str = "0.0.0.0"
    port: int = 8000

    # Telemetry
    environment: str = "development"
    otel_enabled: bool = True
    otlp_endpoint: str = "http://otel-collector:4317"
    log_level: LogLevel = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value


settings = Settings()
