"""Snapshot backup and restore for a Cassandra node.

Backup: snapshot every table, move each table's ``snapshots/<id>``
directory into a staging tree at ``<root>/backup-<id>`` that mirrors the
data directory layout, hand the tree to the sampled owner, pack it into
``<root>/backup-<id>.tar.gz`` and upload that to ``/backup-<id>.tar.gz``
in the bucket.

Restore: resolve the snapshot id (explicit or latest), download and unpack
its archive at ``<root>`` so each table's ``snapshots/<id>`` reappears in
place, then for every table delete the live data files and move the
snapshot files up into the table directory.

Neither run is transactional.  A failure part way through leaves the
staging tree, the local archive, or half-purged tables on disk for the
operator to inspect.  Restore purges a table's live files before it checks
whether the archive holds a snapshot for that table, so tables without
one end up empty.

Usage:
    from cassandra_backup.backup.backup_restore import backup_node, restore_node

    result = await backup_node(config, snapshot_taker, archiver, store)
    result = await restore_node(config, archiver, store, requested_id="1700000000")
"""

import grp
import logging
import os
import pwd
import shutil
from pathlib import Path

from cassandra_backup.adapters.base import Archiver, ObjectStore, SnapshotTaker
from cassandra_backup.backup.models import BackupResult, Ownership, RestoreResult
from cassandra_backup.backup.topology import SNAPSHOTS_DIR, iter_table_dirs, table_label
from cassandra_backup.catalog import (
    archive_key,
    archive_path,
    contains_snapshot,
    latest_snapshot,
    list_snapshots,
    parse_id,
)
from cassandra_backup.config.models import AgentConfig
from cassandra_backup.errors import ArchiveError, DirectoryOperationError, ValidationError

logger = logging.getLogger(__name__)


# ============================================================================
# Filesystem helpers
# ============================================================================


def _sample_ownership(path: Path) -> Ownership:
    """Read the user and group names owning ``path``.

    Ids without a passwd/group entry are kept as numeric strings.

    Raises:
        DirectoryOperationError: If ``path`` cannot be stat'ed.
    """
    try:
        st = path.stat()
    except OSError as e:
        raise DirectoryOperationError(
            f"Unable to get owner and group of {path}: {e}"
        ) from e

    try:
        user = pwd.getpwuid(st.st_uid).pw_name
    except KeyError:
        user = str(st.st_uid)
    try:
        group = grp.getgrgid(st.st_gid).gr_name
    except KeyError:
        group = str(st.st_gid)
    return Ownership(user=user, group=group)


def _resolve_ids(ownership: Ownership) -> tuple[int, int]:
    """Map an ``Ownership`` pair to numeric uid and gid."""
    user, group = ownership.user, ownership.group
    try:
        uid = int(user) if user.isdigit() else pwd.getpwnam(user).pw_uid
        gid = int(group) if group.isdigit() else grp.getgrnam(group).gr_gid
    except KeyError as e:
        raise DirectoryOperationError(f"Unknown owner {ownership}: {e}") from e
    return uid, gid


def _chown_tree(path: Path, ownership: Ownership) -> None:
    """Recursively set ownership of ``path`` and everything under it.

    Raises:
        DirectoryOperationError: If any chown fails.
    """
    uid, gid = _resolve_ids(ownership)
    try:
        os.chown(path, uid, gid, follow_symlinks=False)
        for dirpath, dirnames, filenames in os.walk(path):
            for name in dirnames + filenames:
                os.chown(os.path.join(dirpath, name), uid, gid, follow_symlinks=False)
    except OSError as e:
        raise DirectoryOperationError(
            f"Chown of {path} to {ownership} failed: {e}"
        ) from e


def _remove_tree(path: Path, what: str) -> None:
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise DirectoryOperationError(f"Remove {what} {path} error: {e}") from e


def _mirror_path(config: AgentConfig, staging_dir: Path, path: Path) -> Path:
    """Location of ``path`` inside the staging tree."""
    try:
        relative = path.relative_to(config.root_path)
    except ValueError as e:
        raise DirectoryOperationError(
            f"{path} is not under backup root {config.root_path}"
        ) from e
    return staging_dir / relative


def parse_snapshot_id(requested_id: str | int | None) -> int | None:
    """Parse a requested snapshot id; ``None`` or ``""`` means latest.

    Raises:
        ValidationError: If the value is not an integer.
    """
    if requested_id is None or requested_id == "":
        return None
    if isinstance(requested_id, int):
        return requested_id
    snapshot_id = parse_id(requested_id)
    if snapshot_id is None:
        raise ValidationError("snapshot should be int")
    return snapshot_id


# ============================================================================
# Backup
# ============================================================================


async def backup_node(
    config: AgentConfig,
    snapshot_taker: SnapshotTaker,
    archiver: Archiver,
    store: ObjectStore,
) -> BackupResult:
    """Snapshot the node and ship the snapshot to the bucket.

    Ownership is sampled from the ``snapshots`` directory of the first table
    visited and applied to the whole staging tree.  Tables with no
    ``snapshots/<id>`` directory (e.g. empty tables) are skipped.

    Args:
        config: Agent configuration (topology, root, bucket).
        snapshot_taker: Snapshot engine.
        archiver: Compression tool.
        store: Object store.

    Returns:
        ``BackupResult`` describing the uploaded snapshot.

    Raises:
        SnapshotError: If the snapshot command fails.
        DirectoryOperationError: If creating, moving, chowning, or removing
            directories fails.  Already-moved tables stay in staging.
        ArchiveError: If compression fails.
        RemoteStorageError: If the upload fails.  The local archive stays.

    Example:
        result = await backup_node(
            config,
            NodetoolSnapshotTaker(),
            TarArchiver(),
            AwsCliObjectStore(config.storage),
        )
        print(f"Backup created: {result.snapshot_id}")
    """
    snapshot_id = await snapshot_taker.take_snapshot()
    snapshot_name = str(snapshot_id)
    logger.info("Snapshot taken: %s", snapshot_id)

    staging_dir = config.staging_dir(snapshot_id)
    try:
        staging_dir.mkdir()
    except OSError as e:
        raise DirectoryOperationError(
            f"Create backup dir {staging_dir} error: {e}"
        ) from e

    result = BackupResult(snapshot_id=snapshot_id, archive_key=archive_key(snapshot_id))

    for table_dir in iter_table_dirs(config.data_file_directories):
        snapshots_dir = table_dir / SNAPSHOTS_DIR

        if result.ownership is None:
            result.ownership = _sample_ownership(snapshots_dir)

        snapshot_dir = snapshots_dir / snapshot_name
        if not snapshot_dir.is_dir():
            logger.debug("No snapshot %s for %s", snapshot_name, table_label(table_dir))
            result.tables_skipped.append(str(table_dir))
            continue

        target_parent = _mirror_path(config, staging_dir, snapshots_dir)
        try:
            target_parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(snapshot_dir), str(target_parent / snapshot_name))
        except OSError as e:
            raise DirectoryOperationError(
                f"Move snapshot dir {snapshot_dir} error: {e}"
            ) from e
        result.tables_backed_up.append(str(table_dir))

    # Nothing was visited, so there is no owner to apply
    if result.ownership is not None:
        _chown_tree(staging_dir, result.ownership)

    local_archive = config.local_archive(snapshot_id)
    await archiver.compress(staging_dir, local_archive)
    _remove_tree(staging_dir, "backup dir")

    await store.upload(local_archive, archive_path(snapshot_id))

    try:
        local_archive.unlink()
    except OSError as e:
        raise DirectoryOperationError(
            f"Delete local archive {local_archive} error: {e}"
        ) from e

    logger.info(
        "Backup created: %s (%d tables, %d skipped)",
        snapshot_id,
        len(result.tables_backed_up),
        len(result.tables_skipped),
    )
    return result


# ============================================================================
# Restore
# ============================================================================


async def resolve_snapshot_id(
    store: ObjectStore,
    requested_id: str | int | None = None,
) -> int:
    """Pick the snapshot to restore.

    Args:
        store: Object store holding the archives.
        requested_id: Explicit identifier, or ``None``/``""`` for the latest.

    Returns:
        The identifier to restore.

    Raises:
        ValidationError: If ``requested_id`` is not an int, the catalog is
            empty, or the requested snapshot is not in it.
        RemoteStorageError: If the listing fails.
    """
    requested = parse_snapshot_id(requested_id)

    catalog = await list_snapshots(store)
    if not catalog:
        raise ValidationError("empty backuped snapshots")

    if requested is None:
        return latest_snapshot(catalog)
    if not contains_snapshot(catalog, requested):
        raise ValidationError(f"specified backup is absent: {requested}")
    return requested


async def restore_node(
    config: AgentConfig,
    archiver: Archiver,
    store: ObjectStore,
    requested_id: str | int | None = None,
) -> RestoreResult:
    """Restore a snapshot from the bucket over the live data directories.

    The requested id is validated before any remote or filesystem call.
    Every table's live data files are deleted before its restored snapshot
    is looked up; a table absent from the snapshot is left empty.

    Args:
        config: Agent configuration (topology, root, bucket).
        archiver: Compression tool.
        store: Object store.
        requested_id: Snapshot to restore; ``None`` restores the latest.

    Returns:
        ``RestoreResult`` describing what was purged and restored.

    Raises:
        ValidationError: If the id is malformed or absent, or the catalog
            is empty.
        RemoteStorageError: If listing or downloading fails.
        ArchiveError: If the download is not a regular file or extraction
            fails.
        DirectoryOperationError: If a delete or move fails.  Tables already
            processed stay restored; the failing table may be half purged.

    Example:
        result = await restore_node(config, TarArchiver(), store)
        print(f"Backup restored: {result.snapshot_id}")
    """
    snapshot_id = await resolve_snapshot_id(store, requested_id)
    snapshot_name = str(snapshot_id)
    logger.info("Restoring snapshot %s", snapshot_id)

    local_archive = await store.download(
        archive_path(snapshot_id), config.local_archive(snapshot_id)
    )
    if not local_archive.is_file():
        raise ArchiveError(f"Read backup file error: {local_archive} is not a file")

    await archiver.extract(local_archive, config.root_path)

    try:
        local_archive.unlink()
    except OSError as e:
        raise DirectoryOperationError(
            f"Delete snapshot file {local_archive} error: {e}"
        ) from e

    result = RestoreResult(snapshot_id=snapshot_id)

    for table_dir in iter_table_dirs(config.data_file_directories):
        # Live data files go first, whether or not a snapshot follows
        purged = 0
        try:
            entries = sorted(table_dir.iterdir())
        except OSError as e:
            raise DirectoryOperationError(f"List {table_dir} error: {e}") from e
        for entry in entries:
            # Symlinks are purged as entries, never followed
            if entry.is_dir() and not entry.is_symlink():
                continue
            try:
                entry.unlink()
            except OSError as e:
                raise DirectoryOperationError(f"File delete error {entry}: {e}") from e
            purged += 1
        if purged:
            result.tables_purged.append(str(table_dir))
            result.files_purged += purged

        snapshot_dir = table_dir / SNAPSHOTS_DIR / snapshot_name
        if not snapshot_dir.is_dir():
            logger.debug("No snapshot dir %s", snapshot_dir)
            result.tables_without_snapshot.append(str(table_dir))
            continue

        try:
            for entry in sorted(snapshot_dir.iterdir()):
                target = table_dir / entry.name
                # A live subdirectory (e.g. a secondary index) is replaced
                # by its snapshot copy, not merged into
                if target.is_dir() and not target.is_symlink():
                    shutil.rmtree(target)
                elif target.exists() or target.is_symlink():
                    target.unlink()
                shutil.move(str(entry), str(target))
        except OSError as e:
            raise DirectoryOperationError(
                f"Move data from snapshot dir {snapshot_dir} error: {e}"
            ) from e
        _remove_tree(snapshot_dir, "snapshot dir")

        logger.debug("Restored %s", table_label(table_dir))
        result.tables_restored.append(str(table_dir))

    logger.info(
        "Backup restored: %s (%d tables, %d without snapshot)",
        snapshot_id,
        len(result.tables_restored),
        len(result.tables_without_snapshot),
    )
    return result
