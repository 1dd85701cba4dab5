"""Health check response model."""

from datetime import datetime

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Liveness report with record count and storage integrity."""

    status: str = "OK"
    demandas: int
    integrity: str
    uptime: float
    timestamp: datetime
    memory: dict[str, int]
    version: str
