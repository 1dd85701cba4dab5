"""Snapshot models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from gestao_demandas.utils.dates import utc_now


class SnapshotKind(str, Enum):
    """Why a snapshot was taken."""

    AUTO = "auto"
    MANUAL = "manual"
    STATUS_CHANGE = "status_change"
    DELETE = "delete"
    SHUTDOWN = "shutdown"


class SnapshotRecord(BaseModel):
    """Index entry pointing at a snapshot file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int | None = None
    nome_arquivo: str = Field(..., description="File name inside the backup directory")
    data_backup: str = Field(..., description="Logical snapshot timestamp")
    tamanho: int = Field(..., description="File size in bytes")
    tipo: SnapshotKind
    data_criacao: datetime = Field(default_factory=utc_now)


class SnapshotEnvelope(BaseModel):
    """On-disk snapshot document.

    Only the record list is required to restore; the other fields are
    informational.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    versao: str = "1.0.0"
    data: str | None = None
    tipo: str | None = None
    total_demandas: int | None = None
    demandas: list[dict[str, Any]]
