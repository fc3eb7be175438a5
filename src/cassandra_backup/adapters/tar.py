"""Archiver adapter backed by the ``tar`` command.

Archives are gzip tarballs whose members are relative to the packed
directory (``tar -czf <archive> -C <dir> .``), so extracting them at the
filesystem root puts every file back at its original absolute path.

The archive also holds ``./`` and the parent directories of every data
root (``./var``, ``./var/lib``, ...), owned by the sampled Cassandra owner.
Extracting as root at ``/`` applies that owner and mode to those existing
directories, ``/`` included.

Usage:
    from cassandra_backup.adapters.tar import TarArchiver

    archiver = TarArchiver()
    await archiver.compress(Path("/backup-1700000000"), Path("/backup-1700000000.tar.gz"))
    await archiver.extract(Path("/backup-1700000000.tar.gz"), Path("/"))
"""

from pathlib import Path

from cassandra_backup.adapters.process import run_command
from cassandra_backup.errors import ArchiveError, CommandError


class TarArchiver:
    """``Archiver`` that shells out to ``tar``.

    Args:
        tar_bin: Executable name or path.
    """

    def __init__(self, tar_bin: str = "tar") -> None:
        self._tar_bin = tar_bin

    async def compress(self, source_dir: Path, archive_path: Path) -> None:
        try:
            await run_command(
                self._tar_bin, "-czf", str(archive_path), "-C", str(source_dir), "."
            )
        except CommandError as e:
            raise ArchiveError(f"Compress backup error: {e}") from e

    async def extract(self, archive_path: Path, target_dir: Path) -> None:
        try:
            await run_command(
                self._tar_bin, "-xzf", str(archive_path), "-C", str(target_dir)
            )
        except CommandError as e:
            raise ArchiveError(f"Decompress backup error: {e}") from e
