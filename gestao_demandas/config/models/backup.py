"""Snapshot/backup configuration model."""

from pathlib import Path

from pydantic import BaseModel, Field


class BackupConfig(BaseModel):
    """Where snapshot files live and how often they are taken and purged."""

    directory: Path = Field(default=Path("backups"), description="Snapshot file directory")
    auto_interval_hours: float = Field(
        default=6.0, gt=0, description="Interval between automatic snapshots"
    )
    purge_interval_hours: float = Field(
        default=24.0, gt=0, description="Interval between index purges"
    )
    retention_days: int = Field(
        default=30, gt=0, description="Index entries older than this are purged"
    )
    keep_auto: int = Field(
        default=10, gt=0, description="Automatic snapshots retained after pruning"
    )
    scheduler_enabled: bool = Field(default=True, description="Run the periodic jobs")
    final_snapshot_on_shutdown: bool = Field(
        default=True, description="Take a 'shutdown' snapshot on graceful stop"
    )
    envelope_version: str = Field(default="1.0.0", description="Snapshot file format version")
