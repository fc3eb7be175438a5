"""External tool adapters package.

Provides the ``SnapshotTaker``, ``Archiver`` and ``ObjectStore`` Protocols,
the production adapters that shell out to ``nodetool``, ``tar`` and the
``aws`` CLI, and in-memory adapters for tests.

Usage:
    from cassandra_backup.adapters import (
        AwsCliObjectStore,
        NodetoolSnapshotTaker,
        TarArchiver,
    )
"""

from cassandra_backup.adapters.aws import AwsCliObjectStore
from cassandra_backup.adapters.base import Archiver, ObjectStore, SnapshotTaker
from cassandra_backup.adapters.memory import HardLinkSnapshotTaker, InMemoryObjectStore
from cassandra_backup.adapters.nodetool import NodetoolSnapshotTaker
from cassandra_backup.adapters.tar import TarArchiver

__all__ = [
    "SnapshotTaker",
    "Archiver",
    "ObjectStore",
    "NodetoolSnapshotTaker",
    "TarArchiver",
    "AwsCliObjectStore",
    "InMemoryObjectStore",
    "HardLinkSnapshotTaker",
]
