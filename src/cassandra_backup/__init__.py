"""cassandra-backup: Snapshot backup and restore agent for Cassandra nodes.

Takes ``nodetool`` snapshots of every table, archives them with ``tar``,
and ships the archive to S3 with the ``aws`` CLI.  Restores the latest or
a chosen snapshot back over the live data directories.

Usage:
    from cassandra_backup import backup_node, restore_node, load_agent_config
    from cassandra_backup import connect_and_validate, BackupScheduler
"""

__version__ = "0.1.0"

# Adapters
from cassandra_backup.adapters.base import Archiver, ObjectStore, SnapshotTaker

# Config
from cassandra_backup.config.loader import load_agent_config, load_data_file_directories
from cassandra_backup.config.models import AgentConfig, StorageConfig

# Errors
from cassandra_backup.errors import (
    ArchiveError,
    BackupAgentError,
    ConfigurationError,
    ConnectivityError,
    DirectoryOperationError,
    RemoteStorageError,
    SnapshotError,
    ValidationError,
)

# Factory
from cassandra_backup.factory import AgentAdapters, connect_and_validate, create_adapters

# Catalog
from cassandra_backup.catalog import archive_key, latest_snapshot, list_snapshots

# Backup and restore
from cassandra_backup.backup.backup_restore import backup_node, restore_node
from cassandra_backup.backup.models import BackupResult, Ownership, RestoreResult

# Scheduler
from cassandra_backup.scheduler import BackupScheduler

__all__ = [
    # Adapters
    "SnapshotTaker",
    "Archiver",
    "ObjectStore",
    # Config
    "load_agent_config",
    "load_data_file_directories",
    "AgentConfig",
    "StorageConfig",
    # Errors
    "BackupAgentError",
    "ConfigurationError",
    "ConnectivityError",
    "SnapshotError",
    "DirectoryOperationError",
    "ArchiveError",
    "RemoteStorageError",
    "ValidationError",
    # Factory
    "AgentAdapters",
    "create_adapters",
    "connect_and_validate",
    # Catalog
    "archive_key",
    "list_snapshots",
    "latest_snapshot",
    # Backup and restore
    "backup_node",
    "restore_node",
    "BackupResult",
    "RestoreResult",
    "Ownership",
    # Scheduler
    "BackupScheduler",
]
