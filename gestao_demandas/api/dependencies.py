"""Dependency injection for API routes.

Provides FastAPI dependencies for the stores and services used by API
endpoints. Instances are created once per process from settings and can be
overridden for testing. All three stores share one backend: PostgreSQL when
configured and reachable, in-memory otherwise.
"""

from typing import Annotated

import asyncpg
from fastapi import Depends

from gestao_demandas.audit.recorder import AuditRecorder
from gestao_demandas.audit.store import AuditStore
from gestao_demandas.audit.stores.inmemory import InMemoryAuditStore
from gestao_demandas.audit.stores.postgres import PostgresAuditStore
from gestao_demandas.backup.manager import SnapshotManager
from gestao_demandas.backup.scheduler import SnapshotScheduler
from gestao_demandas.backup.store import SnapshotIndex
from gestao_demandas.backup.stores.inmemory import InMemorySnapshotIndex
from gestao_demandas.backup.stores.postgres import PostgresSnapshotIndex
from gestao_demandas.config import get_settings
from gestao_demandas.config.settings import Settings
from gestao_demandas.db.errors import ConnectionError
from gestao_demandas.db.pool import PostgresPool
from gestao_demandas.db.schema import ensure_schema
from gestao_demandas.demandas.service import DemandaService
from gestao_demandas.demandas.store import DemandaStore
from gestao_demandas.demandas.stores.inmemory import InMemoryDemandaStore
from gestao_demandas.demandas.stores.postgres import PostgresDemandaStore
from gestao_demandas.observability.logging import get_logger

logger = get_logger(__name__)

# Connection pool - shared across stores
_postgres_pool: PostgresPool | None = None

# Store and service instances - created once and reused
_demanda_store: DemandaStore | None = None
_audit_store: AuditStore | None = None
_snapshot_index: SnapshotIndex | None = None
_audit_recorder: AuditRecorder | None = None
_snapshot_manager: SnapshotManager | None = None
_snapshot_scheduler: SnapshotScheduler | None = None
_demanda_service: DemandaService | None = None


async def get_postgres_pool() -> PostgresPool:
    """Get the shared PostgreSQL connection pool.

    Creates and connects the pool on first access and makes sure the
    schema exists.

    Returns:
        Connected PostgresPool instance
    """
    global _postgres_pool
    if _postgres_pool is None:
        pool = PostgresPool.from_config(get_settings().storage.postgres)
        await pool.connect()
        try:
            await ensure_schema(pool)
        except (asyncpg.PostgresError, OSError) as e:
            await pool.close()
            raise ConnectionError(f"Failed to prepare schema: {e}", cause=e) from e
        _postgres_pool = pool
        logger.info("postgres_pool_connected")
    return _postgres_pool


async def _init_stores() -> None:
    """Create the three stores on the configured backend."""
    global _demanda_store, _audit_store, _snapshot_index
    storage = get_settings().storage

    if storage.backend == "postgres":
        try:
            pool = await get_postgres_pool()
        except ConnectionError as e:
            if not storage.fallback_to_inmemory:
                raise
            logger.warning("stores_postgres_failed_using_inmemory", error=str(e))
        else:
            _demanda_store = PostgresDemandaStore(pool)
            _audit_store = PostgresAuditStore(pool)
            _snapshot_index = PostgresSnapshotIndex(pool)
            logger.info("stores_initialized", store_type="postgres")
            return

    _demanda_store = InMemoryDemandaStore()
    _audit_store = InMemoryAuditStore()
    _snapshot_index = InMemorySnapshotIndex()
    logger.info("stores_initialized", store_type="inmemory")


async def get_demanda_store() -> DemandaStore:
    """Get the DemandaStore instance."""
    if _demanda_store is None:
        await _init_stores()
    return _demanda_store


async def get_audit_store() -> AuditStore:
    """Get the AuditStore instance."""
    if _audit_store is None:
        await _init_stores()
    return _audit_store


async def get_snapshot_index() -> SnapshotIndex:
    """Get the SnapshotIndex instance."""
    if _snapshot_index is None:
        await _init_stores()
    return _snapshot_index


async def get_audit_recorder() -> AuditRecorder:
    """Get the AuditRecorder wrapping the audit store."""
    global _audit_recorder
    if _audit_recorder is None:
        _audit_recorder = AuditRecorder(await get_audit_store())
    return _audit_recorder


async def get_snapshot_manager() -> SnapshotManager:
    """Get the SnapshotManager.

    Returns:
        SnapshotManager writing to settings.backup.directory
    """
    global _snapshot_manager
    if _snapshot_manager is None:
        _snapshot_manager = SnapshotManager(
            await get_demanda_store(),
            await get_snapshot_index(),
            get_settings().backup,
        )
        logger.info(
            "snapshot_manager_initialized",
            directory=str(_snapshot_manager.directory),
        )
    return _snapshot_manager


async def get_snapshot_scheduler() -> SnapshotScheduler:
    """Get the SnapshotScheduler driving periodic snapshots and purges."""
    global _snapshot_scheduler
    if _snapshot_scheduler is None:
        backup = get_settings().backup
        _snapshot_scheduler = SnapshotScheduler(
            await get_snapshot_manager(),
            snapshot_interval_seconds=backup.auto_interval_hours * 3600,
            purge_interval_seconds=backup.purge_interval_hours * 3600,
        )
    return _snapshot_scheduler


async def get_demanda_service() -> DemandaService:
    """Get the DemandaService wired to the shared stores."""
    global _demanda_service
    if _demanda_service is None:
        _demanda_service = DemandaService(
            await get_demanda_store(),
            await get_audit_recorder(),
            await get_snapshot_manager(),
        )
    return _demanda_service


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
DemandaStoreDep = Annotated[DemandaStore, Depends(get_demanda_store)]
DemandaServiceDep = Annotated[DemandaService, Depends(get_demanda_service)]
SnapshotManagerDep = Annotated[SnapshotManager, Depends(get_snapshot_manager)]


async def reset_dependencies() -> None:
    """Reset all cached dependencies.

    Used at shutdown and in tests. Stops the scheduler and closes the pool
    before resetting.
    """
    global _postgres_pool, _demanda_store, _audit_store, _snapshot_index
    global _audit_recorder, _snapshot_manager, _snapshot_scheduler, _demanda_service

    if _snapshot_scheduler is not None:
        await _snapshot_scheduler.stop()
        _snapshot_scheduler = None

    if _postgres_pool is not None:
        await _postgres_pool.close()
        _postgres_pool = None

    _demanda_store = None
    _audit_store = None
    _snapshot_index = None
    _audit_recorder = None
    _snapshot_manager = None
    _demanda_service = None
    get_settings.cache_clear()
