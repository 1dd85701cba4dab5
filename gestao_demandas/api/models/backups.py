"""Backup endpoint request and response models."""

from pydantic import BaseModel, ConfigDict, Field

from gestao_demandas.backup.models import SnapshotKind, SnapshotRecord


class BackupCreateRequest(BaseModel):
    tipo: SnapshotKind = SnapshotKind.MANUAL


class BackupCreateResponse(BaseModel):
    success: bool = True
    message: str = "Backup criado com sucesso"
    filename: str


class BackupListResponse(BaseModel):
    success: bool = True
    backups: list[SnapshotRecord]


class RestoreRequest(BaseModel):
    """Body of a restore request; the ID is checked by the route."""

    model_config = ConfigDict(populate_by_name=True)

    backup_id: int | None = Field(default=None, alias="backupId")


class RestoreResponse(BaseModel):
    success: bool = True
    message: str
    restored: int
    failed: int
