"""Observability configuration models."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class LoggingConfig(BaseModel):
    """Structured logging settings."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"
    redact_pii: bool = True


class ObservabilityConfig(BaseModel):
    """Logging, error-log file and metrics settings."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    error_log_path: Path = Field(
        default=Path("error.log"),
        description="Plain-text file receiving unhandled error tracebacks",
    )
    metrics_enabled: bool = Field(default=True, description="Expose /metrics")
