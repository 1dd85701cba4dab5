"""Error response models for consistent API error handling."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from gestao_demandas.utils.dates import utc_now


class ErrorCode(str, Enum):
    """Machine-readable error codes carried in every error envelope."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Malformed request: bad JSON, wrong types, bad query values."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    """The demanda payload broke one or more business rules."""

    DEMANDA_NOT_FOUND = "DEMANDA_NOT_FOUND"
    BACKUP_NOT_FOUND = "BACKUP_NOT_FOUND"
    ROUTE_NOT_FOUND = "ROUTE_NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"

    TAG_CONFLICT = "TAG_CONFLICT"
    """Another record already uses this tag."""

    CORRUPT_BACKUP = "CORRUPT_BACKUP"
    """The snapshot file could not be parsed."""

    BACKUP_FAILED = "BACKUP_FAILED"
    STORE_ERROR = "STORE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing request.

    Example:
        {
            "success": false,
            "error": "Dados inválidos",
            "code": "VALIDATION_FAILED",
            "errors": ["Local é obrigatório"],
            "timestamp": "2024-05-01T10:00:00+00:00"
        }
    """

    success: bool = False
    error: str
    code: ErrorCode
    errors: list[str] | None = None
    message: str | None = None
    path: str | None = None
    method: str | None = None
    timestamp: datetime = Field(default_factory=utc_now)

    def to_content(self) -> dict:
        """JSON body without unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)
