"""Audit entry models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from gestao_demandas.utils.dates import utc_now


class AuditAction(str, Enum):
    """Kind of mutation being recorded."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class AuditEntry(BaseModel):
    """Immutable record of one mutation with before/after images."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: int | None = Field(default=None, description="Store-assigned identifier")
    acao: AuditAction
    tabela: str = Field(..., description="Affected table")
    registro_id: int = Field(..., description="Affected record ID")
    dados_antigos: dict[str, Any] | None = Field(default=None, description="Image before")
    dados_novos: dict[str, Any] | None = Field(default=None, description="Image after")
    usuario_id: int | None = Field(default=None, description="Acting user, when known")
    data_hora: datetime = Field(default_factory=utc_now)
    ip: str | None = Field(default=None, description="Request origin")
