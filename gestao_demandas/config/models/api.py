"""API server configuration model."""

from pydantic import BaseModel, Field


class APIConfig(BaseModel):
    """HTTP server settings."""

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, gt=0, lt=65536, description="Listen port")
    cors_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://0.0.0.0:3000",
        ],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(default=True, description="Allow CORS credentials")
    default_page_size: int = Field(default=50, gt=0, description="Page size when none is given")
    max_page_size: int = Field(default=1000, gt=0, description="Upper bound for page size")
    default_search_limit: int = Field(default=20, gt=0, description="Search result limit")
