"""Snapshot backup and restore orchestration.

Usage:
    from cassandra_backup.backup import backup_node, restore_node
    from cassandra_backup.backup import BackupResult, RestoreResult
"""

from cassandra_backup.backup.backup_restore import (
    backup_node,
    parse_snapshot_id,
    resolve_snapshot_id,
    restore_node,
)
from cassandra_backup.backup.models import BackupResult, Ownership, RestoreResult
from cassandra_backup.backup.topology import iter_table_dirs

__all__ = [
    "BackupResult",
    "RestoreResult",
    "Ownership",
    "backup_node",
    "restore_node",
    "parse_snapshot_id",
    "resolve_snapshot_id",
    "iter_table_dirs",
]
