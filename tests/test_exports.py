"""Tests for the package's public API surface."""

import cassandra_backup
from cassandra_backup.adapters import __all__ as adapters_all
from cassandra_backup.backup import __all__ as backup_all
from cassandra_backup.config import __all__ as config_all


class TestTopLevelExports:
    """Verify everything in __all__ is importable from the package root."""

    def test_version(self) -> None:
        assert cassandra_backup.__version__ == "0.1.0"

    def test_all_names_resolve(self) -> None:
        for name in cassandra_backup.__all__:
            assert hasattr(cassandra_backup, name), f"{name} missing from package"

    def test_core_operations_exported(self) -> None:
        for name in ["backup_node", "restore_node", "load_agent_config",
                     "connect_and_validate", "BackupScheduler", "list_snapshots"]:
            assert name in cassandra_backup.__all__

    def test_error_hierarchy(self) -> None:
        for name in ["ConfigurationError", "ConnectivityError", "SnapshotError",
                     "DirectoryOperationError", "ArchiveError", "RemoteStorageError",
                     "ValidationError"]:
            error_cls = getattr(cassandra_backup, name)
            assert issubclass(error_cls, cassandra_backup.BackupAgentError)


class TestSubpackageExports:
    """Verify subpackage __all__ lists resolve."""

    def test_adapters(self) -> None:
        import cassandra_backup.adapters as pkg
        for name in adapters_all:
            assert hasattr(pkg, name)

    def test_backup(self) -> None:
        import cassandra_backup.backup as pkg
        for name in backup_all:
            assert hasattr(pkg, name)

    def test_config(self) -> None:
        import cassandra_backup.config as pkg
        for name in config_all:
            assert hasattr(pkg, name)
