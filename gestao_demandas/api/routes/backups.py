"""Snapshot endpoints."""

from fastapi import APIRouter

from gestao_demandas.api.dependencies import SnapshotManagerDep
from gestao_demandas.api.exceptions import BackupNotFoundError, InvalidRequestError
from gestao_demandas.api.models.backups import (
    BackupCreateRequest,
    BackupCreateResponse,
    BackupListResponse,
    RestoreRequest,
    RestoreResponse,
)
from gestao_demandas.db.errors import NotFoundError
from gestao_demandas.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/backup", response_model=BackupCreateResponse)
async def create_backup(
    manager: SnapshotManagerDep,
    body: BackupCreateRequest | None = None,
) -> BackupCreateResponse:
    """Take a snapshot now. The kind defaults to ``manual``."""
    kind = (body or BackupCreateRequest()).tipo
    record = await manager.snapshot(kind)
    return BackupCreateResponse(filename=record.nome_arquivo)


@router.get("/backups", response_model=BackupListResponse)
async def list_backups(manager: SnapshotManagerDep) -> BackupListResponse:
    """List every snapshot, newest first."""
    return BackupListResponse(backups=await manager.list_snapshots())


@router.post("/restore", response_model=RestoreResponse)
async def restore_backup(
    manager: SnapshotManagerDep,
    body: RestoreRequest | None = None,
) -> RestoreResponse:
    """Replace all demandas with the contents of a snapshot."""
    backup_id = body.backup_id if body else None
    if backup_id is None:
        raise InvalidRequestError("ID do backup é obrigatório")

    try:
        result = await manager.restore(backup_id)
    except NotFoundError as e:
        raise BackupNotFoundError("Backup não encontrado") from e

    logger.info("restore_completed", backup_id=backup_id, restored=result.restored)
    return RestoreResponse(
        message=(
            f"Backup restaurado com sucesso! "
            f"{result.restored} demandas foram restauradas."
        ),
        restored=result.restored,
        failed=result.failed,
    )
