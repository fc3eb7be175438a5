"""Capability protocols for the external tools the agent drives.

Defines three narrow interfaces -- ``SnapshotTaker``, ``Archiver`` and
``ObjectStore`` -- that the backup and restore orchestrators depend on.
Production implementations shell out to ``nodetool``, ``tar`` and the
``aws`` CLI; ``adapters.memory`` provides in-memory versions for tests.
All methods are ``async def``.

Usage:
    from cassandra_backup.adapters.base import Archiver, ObjectStore, SnapshotTaker

    async def ship(archiver: Archiver, store: ObjectStore) -> None:
        await archiver.compress(Path("/backup-1"), Path("/backup-1.tar.gz"))
        await store.upload(Path("/backup-1.tar.gz"), "/backup-1.tar.gz")
"""

from pathlib import Path
from typing import Protocol


class SnapshotTaker(Protocol):
    """Database snapshot engine interface."""

    async def take_snapshot(self) -> int:
        """Freeze every table under a new snapshot identifier.

        Returns:
            Snapshot identifier (Unix epoch seconds).  Each table that has
            data gets a ``snapshots/<id>`` directory.

        Raises:
            SnapshotError: If the snapshot engine fails.
        """
        ...


class Archiver(Protocol):
    """Compression tool interface."""

    async def compress(self, source_dir: Path, archive_path: Path) -> None:
        """Pack the contents of ``source_dir`` into a gzip tarball.

        Member paths are recorded relative to ``source_dir``.

        Raises:
            ArchiveError: If compression fails.
        """
        ...

    async def extract(self, archive_path: Path, target_dir: Path) -> None:
        """Unpack ``archive_path`` into ``target_dir``.

        Raises:
            ArchiveError: If extraction fails.
        """
        ...


class ObjectStore(Protocol):
    """Object storage client interface.

    Remote paths are bucket-absolute and must start with ``/``.
    """

    async def check_connection(self) -> None:
        """Confirm the bucket is reachable.

        Raises:
            ConnectivityError: If the bucket cannot be listed.
        """
        ...

    async def list_keys(self) -> list[str]:
        """List every object key in the bucket.

        Raises:
            RemoteStorageError: If the listing fails, is empty, or has no
                ``Contents`` field.
        """
        ...

    async def upload(self, local_path: Path, remote_path: str) -> None:
        """Copy a local file to ``remote_path``.

        Raises:
            RemoteStorageError: If ``remote_path`` does not start with ``/``
                or the upload fails.
        """
        ...

    async def download(self, remote_path: str, local_path: Path) -> Path:
        """Copy ``remote_path`` to a local file.

        Returns:
            The local path written.

        Raises:
            RemoteStorageError: If ``remote_path`` does not start with ``/``
                or the download fails.
        """
        ...
