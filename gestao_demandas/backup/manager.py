"""Snapshot creation, retention and restore.

A snapshot is a pretty-printed JSON document holding every demanda, written
to the backup directory and catalogued in the SnapshotIndex. Automatic
snapshots are pruned to the newest ``keep_auto``; index entries older than
``retention_days`` are purged together with their files.
"""

import asyncio
import json
from datetime import datetime, timedelta
from pathlib import Path

import pydantic

from gestao_demandas.backup.errors import BackupError, CorruptBackupError
from gestao_demandas.backup.models import SnapshotEnvelope, SnapshotKind, SnapshotRecord
from gestao_demandas.backup.store import SnapshotIndex
from gestao_demandas.config.models.backup import BackupConfig
from gestao_demandas.db.errors import NotFoundError, StoreError
from gestao_demandas.demandas.models import Demanda, RestoreResult
from gestao_demandas.demandas.store import DemandaStore
from gestao_demandas.demandas.tags import generate_tag
from gestao_demandas.observability.logging import get_logger
from gestao_demandas.observability.metrics import (
    RESTORES,
    SNAPSHOT_SIZE,
    SNAPSHOTS,
    SNAPSHOTS_PRUNED,
)
from gestao_demandas.utils.dates import utc_now
from gestao_demandas.utils.tasks import BackgroundTaskSet

logger = get_logger(__name__)


def snapshot_file_stem(kind: SnapshotKind, moment: datetime) -> str:
    """File name without extension, e.g. ``backup_auto_2024-05-01T10-00-00-123456+00-00``."""
    stamp = moment.isoformat().replace(":", "-").replace(".", "-")
    return f"backup_{kind.value}_{stamp}"


class SnapshotManager:
    """Writes, lists, prunes and restores snapshots."""

    def __init__(
        self,
        store: DemandaStore,
        index: SnapshotIndex,
        config: BackupConfig,
    ) -> None:
        """Initialize the manager.

        Args:
            store: Source and restore target of the records
            index: Catalog of snapshot files
            config: Directory and retention settings
        """
        self._store = store
        self._index = index
        self._config = config
        self._directory = Path(config.directory)
        self._tasks = BackgroundTaskSet("snapshots")

    @property
    def directory(self) -> Path:
        return self._directory

    async def snapshot(self, kind: SnapshotKind) -> SnapshotRecord:
        """Write a snapshot of every record and register it.

        Raises:
            BackupError: If the records cannot be read or the file written
        """
        now = utc_now()
        try:
            demandas = await self._store.list_all()
            envelope = SnapshotEnvelope(
                versao=self._config.envelope_version,
                data=now.isoformat(),
                tipo=kind.value,
                total_demandas=len(demandas),
                demandas=[d.to_json() for d in demandas],
            )
            payload = json.dumps(
                envelope.model_dump(mode="json", by_alias=True),
                ensure_ascii=False,
                indent=2,
            ).encode("utf-8")
            path = await asyncio.to_thread(
                self._write_file, snapshot_file_stem(kind, now), payload
            )
            record = await self._index.register(
                SnapshotRecord(
                    nome_arquivo=path.name,
                    data_backup=now.isoformat(),
                    tamanho=len(payload),
                    tipo=kind,
                    data_criacao=now,
                )
            )
        except (StoreError, OSError) as e:
            SNAPSHOTS.labels(kind=kind.value, outcome="error").inc()
            logger.error("snapshot_failed", kind=kind.value, error=str(e))
            raise BackupError(f"Erro ao criar backup: {e}", cause=e) from e

        SNAPSHOTS.labels(kind=kind.value, outcome="success").inc()
        SNAPSHOT_SIZE.observe(record.tamanho)
        logger.info(
            "snapshot_created",
            kind=kind.value,
            filename=record.nome_arquivo,
            size=record.tamanho,
            demandas=len(demandas),
        )

        if kind == SnapshotKind.AUTO:
            try:
                await self.prune_auto()
            except StoreError as e:
                logger.warning("auto_snapshot_prune_failed", error=str(e))
        return record

    def _write_file(self, stem: str, payload: bytes) -> Path:
        """Create the snapshot file, suffixing the name if it already exists."""
        self._directory.mkdir(parents=True, exist_ok=True)
        candidate = self._directory / f"{stem}.json"
        attempt = 1
        while True:
            try:
                with candidate.open("xb") as handle:
                    handle.write(payload)
                return candidate
            except FileExistsError:
                candidate = self._directory / f"{stem}_{attempt}.json"
                attempt += 1

    async def snapshot_safely(self, kind: SnapshotKind) -> SnapshotRecord | None:
        """Take a snapshot, logging instead of raising on failure."""
        try:
            return await self.snapshot(kind)
        except BackupError:
            # already logged and counted in snapshot()
            return None

    def schedule(self, kind: SnapshotKind) -> asyncio.Task[SnapshotRecord | None]:
        """Take a snapshot in the background and return immediately."""
        return self._tasks.spawn(self.snapshot_safely(kind), name=f"snapshot-{kind.value}")

    async def drain(self) -> None:
        """Wait for background snapshots still in flight."""
        await self._tasks.drain()

    async def list_snapshots(self) -> list[SnapshotRecord]:
        """Every index entry, newest first."""
        return await self._index.list_snapshots()

    async def prune_auto(self) -> int:
        """Keep only the newest ``keep_auto`` automatic snapshots."""
        autos = await self._index.list_by_kind(SnapshotKind.AUTO)
        excess = autos[self._config.keep_auto :]
        if not excess:
            return 0
        removed = await self._index.delete_many([r.id for r in excess])
        await asyncio.to_thread(self._remove_files, [r.nome_arquivo for r in excess])
        SNAPSHOTS_PRUNED.labels(reason="auto_retention").inc(removed)
        logger.info("auto_snapshots_pruned", removed=removed, kept=self._config.keep_auto)
        return removed

    async def purge_expired(self, now: datetime | None = None) -> int:
        """Remove index entries (and files) older than the retention window."""
        cutoff = (now or utc_now()) - timedelta(days=self._config.retention_days)
        expired = await self._index.list_older_than(cutoff)
        if not expired:
            return 0
        removed = await self._index.delete_many([r.id for r in expired])
        await asyncio.to_thread(self._remove_files, [r.nome_arquivo for r in expired])
        SNAPSHOTS_PRUNED.labels(reason="expired").inc(removed)
        logger.info("expired_snapshots_purged", removed=removed, cutoff=cutoff.isoformat())
        return removed

    def _remove_files(self, names: list[str]) -> None:
        for name in names:
            try:
                (self._directory / name).unlink(missing_ok=True)
            except OSError as e:
                logger.warning("snapshot_file_remove_failed", filename=name, error=str(e))

    async def restore(self, snapshot_id: int) -> RestoreResult:
        """Replace every record with the contents of a snapshot.

        Nothing is modified unless the file parses and holds a record list.

        Raises:
            NotFoundError: If no index entry has this ID
            CorruptBackupError: If the file is missing, not JSON, or has no record list
        """
        record = await self._index.get(snapshot_id)
        if record is None:
            RESTORES.labels(outcome="not_found").inc()
            raise NotFoundError(f"Backup {snapshot_id} não encontrado")

        path = self._directory / record.nome_arquivo
        try:
            raw = await asyncio.to_thread(path.read_bytes)
            envelope = SnapshotEnvelope.model_validate_json(raw)
        except (OSError, pydantic.ValidationError) as e:
            RESTORES.labels(outcome="corrupt").inc()
            logger.error(
                "snapshot_unreadable",
                snapshot_id=snapshot_id,
                filename=record.nome_arquivo,
                error=str(e),
            )
            raise CorruptBackupError(
                f"Erro ao processar arquivo de backup: {record.nome_arquivo}", cause=e
            ) from e

        records: list[Demanda] = []
        invalid = 0
        for position, raw_record in enumerate(envelope.demandas):
            try:
                demanda = Demanda.model_validate(raw_record)
            except pydantic.ValidationError as e:
                invalid += 1
                logger.warning("restore_record_invalid", position=position, error=str(e))
                continue
            if not demanda.tag:
                demanda = demanda.model_copy(update={"tag": generate_tag()})
            records.append(demanda)

        result = await self._store.replace_all(records)
        result.failed += invalid
        RESTORES.labels(outcome="success").inc()
        logger.info(
            "snapshot_restored",
            snapshot_id=snapshot_id,
            filename=record.nome_arquivo,
            restored=result.restored,
            failed=result.failed,
        )
        return result
