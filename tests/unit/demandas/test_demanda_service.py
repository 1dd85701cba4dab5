"""Unit tests for DemandaService."""

from datetime import date, timedelta
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from gestao_demandas.audit.models import AuditAction
from gestao_demandas.audit.recorder import AuditRecorder
from gestao_demandas.audit.stores.inmemory import InMemoryAuditStore
from gestao_demandas.backup.manager import SnapshotManager
from gestao_demandas.backup.models import SnapshotKind
from gestao_demandas.backup.stores.inmemory import InMemorySnapshotIndex
from gestao_demandas.config.models.backup import BackupConfig
from gestao_demandas.db.errors import ConflictError, ConnectionError, NotFoundError
from gestao_demandas.demandas.models import StatusDemanda
from gestao_demandas.demandas.service import DemandaService
from gestao_demandas.demandas.stores.inmemory import InMemoryDemandaStore
from gestao_demandas.demandas.validation import MSG_DATA_LIMITE_PASSADA, DemandaValidationError


async def settle(recorder: AuditRecorder, manager: SnapshotManager) -> None:
    await recorder.drain()
    await manager.drain()


class TestCreate:
    @pytest.mark.asyncio
    async def test_fills_server_fields(self, service: DemandaService, demanda_payload) -> None:
        created = await service.create_demanda(demanda_payload)

        assert created.id == 1
        assert created.tag.startswith("DEM-")
        assert created.status == StatusDemanda.PENDENTE
        assert created.criado_por == 7
        assert created.atualizado_por is None
        assert created.data_criacao is not None
        assert created.data_atualizacao is not None

    @pytest.mark.asyncio
    async def test_accepts_snake_case_payload(
        self, service: DemandaService, demanda_payload
    ) -> None:
        payload = dict(demanda_payload)
        payload["nome_demanda"] = payload.pop("nomeDemanda")
        payload["data_limite"] = payload.pop("dataLimite")
        payload["funcionario_id"] = payload.pop("funcionarioId")

        created = await service.create_demanda(payload)

        assert created.nome_demanda == demanda_payload["nomeDemanda"]
        assert created.data_limite.isoformat() == demanda_payload["dataLimite"]
        assert created.criado_por == 7

    @pytest.mark.asyncio
    async def test_blank_tag_is_generated(self, service: DemandaService, demanda_payload) -> None:
        created = await service.create_demanda({**demanda_payload, "tag": "  "})

        assert created.tag.startswith("DEM-")

    @pytest.mark.asyncio
    async def test_client_id_is_ignored(self, service: DemandaService, demanda_payload) -> None:
        created = await service.create_demanda({**demanda_payload, "id": 999})
        assert created.id == 1

    @pytest.mark.asyncio
    async def test_invalid_payload_touches_nothing(
        self,
        service: DemandaService,
        demanda_store: InMemoryDemandaStore,
        audit_store: InMemoryAuditStore,
        recorder: AuditRecorder,
        snapshots: SnapshotManager,
        demanda_payload,
    ) -> None:
        with pytest.raises(DemandaValidationError) as exc_info:
            await service.create_demanda({**demanda_payload, "descricao": "short"})

        await settle(recorder, snapshots)
        assert any("10 caracteres" in e for e in exc_info.value.errors)
        assert await demanda_store.count() == 0
        assert await audit_store.list_entries() == []
        assert await snapshots.list_snapshots() == []

    @pytest.mark.asyncio
    async def test_type_errors_become_validation_errors(
        self, service: DemandaService, demanda_payload
    ) -> None:
        with pytest.raises(DemandaValidationError) as exc_info:
            await service.create_demanda({**demanda_payload, "funcionarioId": "abc"})

        assert any(e.startswith("funcionarioId") for e in exc_info.value.errors)

    @pytest.mark.asyncio
    async def test_writes_audit_entry_and_auto_snapshot(
        self,
        service: DemandaService,
        audit_store: InMemoryAuditStore,
        recorder: AuditRecorder,
        snapshots: SnapshotManager,
        demanda_payload,
    ) -> None:
        created = await service.create_demanda(demanda_payload, actor_id=7, origin="10.0.0.1")
        await settle(recorder, snapshots)

        entries = await audit_store.list_entries(registro_id=created.id)
        assert len(entries) == 1
        entry = entries[0]
        assert entry.acao == AuditAction.CREATE
        assert entry.tabela == "demandas"
        assert entry.dados_antigos is None
        assert entry.dados_novos["tag"] == created.tag
        assert entry.usuario_id == 7
        assert entry.ip == "10.0.0.1"

        kinds = [s.tipo for s in await snapshots.list_snapshots()]
        assert kinds == [SnapshotKind.AUTO]

    @pytest.mark.asyncio
    async def test_tag_conflict_propagates(
        self, service: DemandaService, demanda_payload
    ) -> None:
        await service.create_demanda({**demanda_payload, "tag": "DEM-FIXO"})

        with pytest.raises(ConflictError):
            await service.create_demanda({**demanda_payload, "tag": "DEM-FIXO"})

    @pytest.mark.asyncio
    async def test_audit_failure_does_not_fail_create(
        self,
        demanda_store: InMemoryDemandaStore,
        snapshots: SnapshotManager,
        demanda_payload,
    ) -> None:
        broken_audit = InMemoryAuditStore()
        broken_audit.save_entry = AsyncMock(side_effect=ConnectionError("down"))
        recorder = AuditRecorder(broken_audit)
        service = DemandaService(demanda_store, recorder, snapshots)

        created = await service.create_demanda(demanda_payload)
        await settle(recorder, snapshots)

        assert (await demanda_store.get(created.id)).tag == created.tag


class TestUpdate:
    @pytest.mark.asyncio
    async def test_merges_and_preserves_identity(
        self, service: DemandaService, demanda_payload
    ) -> None:
        created = await service.create_demanda(demanda_payload)

        updated = await service.update_demanda(
            created.id,
            {
                "local": "Filial",
                "id": 500,
                "dataCriacao": "2000-01-01T00:00:00Z",
                "criadoPor": 99,
            },
            actor_id=3,
        )

        assert updated.id == created.id
        assert updated.local == "Filial"
        assert updated.nome_demanda == created.nome_demanda
        assert updated.data_criacao == created.data_criacao
        assert updated.criado_por == created.criado_por
        assert updated.atualizado_por == 3
        assert updated.data_atualizacao >= created.data_atualizacao

    @pytest.mark.asyncio
    @pytest.mark.parametrize("blank_tag", [None, "", "   "])
    async def test_blank_tag_keeps_current_tag(
        self, service: DemandaService, demanda_payload, blank_tag
    ) -> None:
        first = await service.create_demanda(demanda_payload)
        second = await service.create_demanda(demanda_payload)

        updated_first = await service.update_demanda(first.id, {"tag": blank_tag})
        updated_second = await service.update_demanda(second.id, {"tag": blank_tag})

        assert updated_first.tag == first.tag
        assert updated_second.tag == second.tag

    @pytest.mark.asyncio
    async def test_new_tag_is_applied(self, service: DemandaService, demanda_payload) -> None:
        created = await service.create_demanda(demanda_payload)

        updated = await service.update_demanda(created.id, {"tag": "DEM-CUSTOM"})

        assert updated.tag == "DEM-CUSTOM"

    @pytest.mark.asyncio
    async def test_snake_case_keys_are_applied(
        self, service: DemandaService, demanda_payload
    ) -> None:
        created = await service.create_demanda(demanda_payload)

        updated = await service.update_demanda(
            created.id, {"nome_demanda": "Renamed task", "comentario_gestor": "ok"}
        )

        assert updated.nome_demanda == "Renamed task"
        assert updated.comentario_gestor == "ok"

    @pytest.mark.asyncio
    async def test_snake_case_immutable_keys_ignored(
        self, service: DemandaService, demanda_payload
    ) -> None:
        created = await service.create_demanda(demanda_payload)

        updated = await service.update_demanda(
            created.id, {"criado_por": 99, "data_criacao": "2000-01-01T00:00:00Z"}
        )

        assert updated.criado_por == created.criado_por
        assert updated.data_criacao == created.data_criacao

    @pytest.mark.asyncio
    async def test_validates_merged_record(
        self, service: DemandaService, demanda_store: InMemoryDemandaStore, demanda_payload
    ) -> None:
        created = await service.create_demanda(demanda_payload)

        with pytest.raises(DemandaValidationError):
            await service.update_demanda(created.id, {"nomeDemanda": "x"})
        assert (await demanda_store.get(created.id)).nome_demanda == created.nome_demanda

    @pytest.mark.asyncio
    async def test_past_due_date_rejected_only_when_changed(
        self,
        service: DemandaService,
        demanda_store: InMemoryDemandaStore,
        demanda_payload,
    ) -> None:
        created = await service.create_demanda(demanda_payload)
        # Simulate a record whose due date has since passed.
        past = date.today() - timedelta(days=5)
        await demanda_store.update(created.id, lambda d: d.model_copy(update={"data_limite": past}))

        updated = await service.update_demanda(
            created.id, {"local": "Filial", "dataLimite": past.isoformat()}
        )
        assert updated.local == "Filial"

        with pytest.raises(DemandaValidationError) as exc_info:
            await service.update_demanda(
                created.id, {"dataLimite": (past - timedelta(days=1)).isoformat()}
            )
        assert exc_info.value.errors == [MSG_DATA_LIMITE_PASSADA]

    @pytest.mark.asyncio
    async def test_missing_record(self, service: DemandaService) -> None:
        with pytest.raises(NotFoundError):
            await service.update_demanda(404, {"local": "x"})

    @pytest.mark.asyncio
    async def test_audit_has_before_and_after(
        self,
        service: DemandaService,
        audit_store: InMemoryAuditStore,
        recorder: AuditRecorder,
        snapshots: SnapshotManager,
        demanda_payload,
    ) -> None:
        created = await service.create_demanda(demanda_payload)
        await service.update_demanda(created.id, {"local": "Filial"})
        await settle(recorder, snapshots)

        entries = await audit_store.list_entries(acao=AuditAction.UPDATE)
        assert len(entries) == 1
        assert entries[0].dados_antigos["local"] == "Sede"
        assert entries[0].dados_novos["local"] == "Filial"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["aprovada", "reprovada"])
    async def test_critical_status_triggers_snapshot(
        self,
        service: DemandaService,
        recorder: AuditRecorder,
        snapshots: SnapshotManager,
        demanda_payload,
        status: str,
    ) -> None:
        created = await service.create_demanda(demanda_payload)
        await settle(recorder, snapshots)

        await service.update_demanda(created.id, {"status": status})
        await settle(recorder, snapshots)

        kinds = [s.tipo for s in await snapshots.list_snapshots()]
        assert SnapshotKind.STATUS_CHANGE in kinds

    @pytest.mark.asyncio
    async def test_non_critical_status_takes_no_snapshot(
        self,
        service: DemandaService,
        recorder: AuditRecorder,
        snapshots: SnapshotManager,
        demanda_payload,
    ) -> None:
        created = await service.create_demanda(demanda_payload)
        await service.update_demanda(created.id, {"status": "finalizado_pendente_aprovacao"})
        await settle(recorder, snapshots)

        kinds = [s.tipo for s in await snapshots.list_snapshots()]
        assert SnapshotKind.STATUS_CHANGE not in kinds


class TestDelete:
    @pytest.mark.asyncio
    async def test_snapshot_captures_record_before_removal(
        self,
        service: DemandaService,
        demanda_store: InMemoryDemandaStore,
        recorder: AuditRecorder,
        snapshots: SnapshotManager,
        backup_dir: Path,
        demanda_payload,
    ) -> None:
        created = await service.create_demanda(demanda_payload)
        await settle(recorder, snapshots)

        await service.delete_demanda(created.id, actor_id=1)

        delete_snapshots = [
            s for s in await snapshots.list_snapshots() if s.tipo == SnapshotKind.DELETE
        ]
        assert len(delete_snapshots) == 1
        content = (backup_dir / delete_snapshots[0].nome_arquivo).read_text(encoding="utf-8")
        assert created.tag in content
        assert await demanda_store.count() == 0

    @pytest.mark.asyncio
    async def test_missing_record_has_no_side_effects(
        self,
        service: DemandaService,
        audit_store: InMemoryAuditStore,
        recorder: AuditRecorder,
        snapshots: SnapshotManager,
    ) -> None:
        with pytest.raises(NotFoundError):
            await service.delete_demanda(77)

        await settle(recorder, snapshots)
        assert await audit_store.list_entries() == []
        assert await snapshots.list_snapshots() == []

    @pytest.mark.asyncio
    async def test_delete_audit_entry(
        self,
        service: DemandaService,
        audit_store: InMemoryAuditStore,
        recorder: AuditRecorder,
        snapshots: SnapshotManager,
        demanda_payload,
    ) -> None:
        created = await service.create_demanda(demanda_payload)
        await service.delete_demanda(created.id, actor_id=4, origin="127.0.0.1")
        await settle(recorder, snapshots)

        entries = await audit_store.list_entries(acao=AuditAction.DELETE)
        assert len(entries) == 1
        assert entries[0].dados_antigos["id"] == created.id
        assert entries[0].dados_novos is None
        assert entries[0].usuario_id == 4

    @pytest.mark.asyncio
    async def test_snapshot_failure_does_not_block_delete(
        self,
        demanda_store: InMemoryDemandaStore,
        recorder: AuditRecorder,
        tmp_path: Path,
        demanda_payload,
    ) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        manager = SnapshotManager(
            demanda_store, InMemorySnapshotIndex(), BackupConfig(directory=blocker)
        )
        service = DemandaService(demanda_store, recorder, manager)
        created = await service.create_demanda(demanda_payload)

        await service.delete_demanda(created.id)
        await settle(recorder, manager)

        assert await demanda_store.count() == 0
        assert await manager.list_snapshots() == []


class TestSearchAndStatistics:
    @pytest.mark.asyncio
    async def test_search_requires_two_characters(
        self, service: DemandaService, demanda_payload
    ) -> None:
        await service.create_demanda(demanda_payload)

        assert await service.search(None, 20) == []
        assert await service.search("r", 20) == []
        assert len(await service.search("revisar", 20)) == 1

    @pytest.mark.asyncio
    async def test_statistics(self, service: DemandaService, demanda_payload) -> None:
        created = await service.create_demanda(demanda_payload)
        await service.update_demanda(created.id, {"status": "aprovada"})
        await service.create_demanda(demanda_payload)

        stats = await service.statistics(30)

        assert stats.total == 2
        assert stats.aprovadas == 1
        assert stats.pendentes == 1
