"""Result models for backup and restore runs.

Usage:
    from cassandra_backup.backup.models import BackupResult, Ownership

    result = await backup_node(config, snapshot_taker, archiver, store)
    print(result.snapshot_id, result.ownership)
"""

from pydantic import BaseModel, Field


class Ownership(BaseModel):
    """User and group owning a snapshots directory."""

    user: str
    group: str

    def __str__(self) -> str:
        return f"{self.user}:{self.group}"


class BackupResult(BaseModel):
    """Result of a successful ``backup_node()`` run."""

    snapshot_id: int
    archive_key: str
    tables_backed_up: list[str] = Field(default_factory=list)   # table dirs moved into staging
    tables_skipped: list[str] = Field(default_factory=list)     # no snapshots/<id> for this run
    ownership: Ownership | None = None                          # None when no table was visited


class RestoreResult(BaseModel):
    """Result of a successful ``restore_node()`` run."""

    snapshot_id: int
    tables_restored: list[str] = Field(default_factory=list)
    tables_purged: list[str] = Field(default_factory=list)
    files_purged: int = 0
    tables_without_snapshot: list[str] = Field(default_factory=list)  # purged, nothing restored
