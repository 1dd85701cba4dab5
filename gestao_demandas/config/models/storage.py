"""Storage backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

BackendType = Literal["inmemory", "postgres"]


class PostgresConfig(BaseModel):
    """PostgreSQL connection pool configuration.

    The DSN should come from environment variables (DEMANDAS_STORAGE__POSTGRES__DSN
    or DATABASE_URL), not from committed config files.
    """

    dsn: str | None = Field(default=None, description="Connection URL")
    min_pool_size: int = Field(default=2, gt=0, description="Minimum connections to keep open")
    max_pool_size: int = Field(default=10, gt=0, description="Maximum connections in pool")
    max_inactive_connection_lifetime: float = Field(
        default=300.0,
        gt=0,
        description="Close connections idle longer than this (seconds)",
    )
    command_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Default timeout for queries (seconds)",
    )


class StorageConfig(BaseModel):
    """Configuration for the record, audit and backup-index stores."""

    backend: BackendType = Field(
        default="inmemory",
        description="Backend shared by all stores",
    )
    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    fallback_to_inmemory: bool = Field(
        default=True,
        description="Use in-memory stores when PostgreSQL is unreachable at startup",
    )
