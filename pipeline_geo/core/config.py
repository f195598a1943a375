"""Application configuration."""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Pipeline geospatial settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "pipeline-geo"
    DEBUG: bool = False

    # Remote network API
    API_BASE_URL: str = "http://localhost:8080/api"
    API_TOKEN: str | None = Field(default=None, validation_alias="SECRET_API_TOKEN")
    API_TIMEOUT_SECONDS: float = 30.0  # Applied by the httpx client, no internal timeouts

    # Aggregation
    PAGE_SIZE: int = 100

    # Rendering geometry
    CURVE_BASE_OFFSET: float = 0.0001  # Degrees between adjacent curves in a route group
    CURVE_SEGMENTS: int = 50
    SIMPLIFY_TOLERANCE_KM: float = 0.001
    SEGMENT_JOIN_TOLERANCE: float = 0.000001  # Degrees; shared endpoints between segments

    @field_validator("API_BASE_URL", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL so endpoint paths can be joined with a leading slash."""
        return v.rstrip("/")

    @field_validator("PAGE_SIZE", "CURVE_SEGMENTS", mode="after")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        """Reject zero or negative sizes."""
        if v <= 0:
            msg = f"Value must be a positive integer, got {v}"
            raise ValueError(msg)
        return v

    @field_validator("API_TIMEOUT_SECONDS", "SIMPLIFY_TOLERANCE_KM", "SEGMENT_JOIN_TOLERANCE", mode="after")
    @classmethod
    def validate_non_negative_float(cls, v: float) -> float:
        """Reject negative tolerances and timeouts."""
        if v < 0:
            msg = f"Value must not be negative, got {v}"
            raise ValueError(msg)
        return v

    # OpenTelemetry Settings (for observability)
    OTEL_ENABLED: bool = False
    OTEL_SERVICE_NAME: str = "pipeline-geo"
    OTEL_ENVIRONMENT: str = "production"
    OTEL_EXPORTER_OTLP_TRACES_ENDPOINT: str | None = None
    OTEL_EXPORTER_OTLP_HEADERS: str | None = Field(default=None, validation_alias="SECRET_OTEL_HEADERS")

    # Logging Settings
    LOG_LEVEL: str = "INFO"

    @field_validator("LOG_LEVEL", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        normalized = v.upper()
        valid_levels = logging.getLevelNamesMapping()
        if normalized not in valid_levels:
            msg = f"Invalid LOG_LEVEL '{v}'. Must be one of: {', '.join(sorted(valid_levels.keys()))}"
            raise ValueError(msg)
        return normalized


settings = Settings()


def require_config(*field_names: str) -> None:
    """
    Validate that required configuration fields are set.

    Args:
        *field_names: Names of required configuration fields

    Raises:
        ValueError: If any required field is missing or None

    Example:
        from pipeline_geo.core.config import require_config
        require_config("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT")
    """
    missing = []
    for field in field_names:
        value = getattr(settings, field, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)

    if missing:
        msg = f"Required configuration missing: {', '.join(missing)}"
        raise ValueError(msg)
