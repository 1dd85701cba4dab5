"""Integration tests for PostgresSnapshotIndex."""

from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio

from gestao_demandas.backup.models import SnapshotKind, SnapshotRecord
from gestao_demandas.backup.stores.postgres import PostgresSnapshotIndex

NOW = datetime.now(UTC)


def make_record(name: str, kind: SnapshotKind, age: timedelta) -> SnapshotRecord:
    created = NOW - age
    return SnapshotRecord(
        nome_arquivo=name,
        data_backup=created.isoformat(),
        tamanho=128,
        tipo=kind,
        data_criacao=created,
    )


@pytest_asyncio.fixture
async def snapshot_index(postgres_pool, clean_postgres):
    """Create PostgresSnapshotIndex with test pool."""
    return PostgresSnapshotIndex(postgres_pool)


@pytest.mark.integration
class TestPostgresSnapshotIndex:
    async def test_register_and_get(self, snapshot_index) -> None:
        saved = await snapshot_index.register(
            make_record("a.json", SnapshotKind.MANUAL, timedelta(0))
        )

        fetched = await snapshot_index.get(saved.id)

        assert fetched is not None
        assert fetched.nome_arquivo == "a.json"
        assert fetched.tipo == SnapshotKind.MANUAL
        assert await snapshot_index.get(999999) is None

    async def test_newest_first(self, snapshot_index) -> None:
        await snapshot_index.register(make_record("old.json", SnapshotKind.AUTO, timedelta(hours=2)))
        await snapshot_index.register(make_record("new.json", SnapshotKind.AUTO, timedelta(0)))
        await snapshot_index.register(
            make_record("manual.json", SnapshotKind.MANUAL, timedelta(hours=1))
        )

        all_names = [r.nome_arquivo for r in await snapshot_index.list_snapshots()]
        auto_names = [r.nome_arquivo for r in await snapshot_index.list_by_kind(SnapshotKind.AUTO)]

        assert all_names == ["new.json", "manual.json", "old.json"]
        assert auto_names == ["new.json", "old.json"]

    async def test_older_than_and_delete(self, snapshot_index) -> None:
        expired = await snapshot_index.register(
            make_record("expired.json", SnapshotKind.AUTO, timedelta(days=31))
        )
        await snapshot_index.register(make_record("fresh.json", SnapshotKind.AUTO, timedelta(days=1)))

        older = await snapshot_index.list_older_than(NOW - timedelta(days=30))

        assert [r.id for r in older] == [expired.id]
        assert await snapshot_index.delete_many([expired.id, 999999]) == 1
        assert [r.nome_arquivo for r in await snapshot_index.list_snapshots()] == ["fresh.json"]

    async def test_delete_nothing(self, snapshot_index) -> None:
        assert await snapshot_index.delete_many([]) == 0
