"""Configuration section models."""

from gestao_demandas.config.models.api import APIConfig
from gestao_demandas.config.models.backup import BackupConfig
from gestao_demandas.config.models.observability import LoggingConfig, ObservabilityConfig
from gestao_demandas.config.models.storage import PostgresConfig, StorageConfig

__all__ = [
    "APIConfig",
    "BackupConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "PostgresConfig",
    "StorageConfig",
]
