"""Remote snapshot catalog.

Names archives, parses identifiers back out of object keys, and picks the
snapshot to restore.  Only ``list_snapshots`` does I/O.

Usage:
    from cassandra_backup.catalog import latest_snapshot, list_snapshots

    catalog = await list_snapshots(store)
    if catalog:
        snapshot_id = latest_snapshot(catalog)
"""

import re

from cassandra_backup.adapters.base import ObjectStore
from cassandra_backup.errors import ValidationError

ARCHIVE_PREFIX = "backup-"
ARCHIVE_SUFFIX = ".tar.gz"

# Optional sign, then ASCII digits only (no spaces, underscores or other scripts)
_ID_PATTERN = re.compile(r"[+-]?[0-9]+", re.ASCII)


def parse_id(text: str) -> int | None:
    """Parse a snapshot identifier; ``None`` unless ``text`` is a plain integer.

    Examples:
        >>> parse_id("1700000000")
        1700000000
        >>> parse_id(" 1_700 ") is None
        True
    """
    if not _ID_PATTERN.fullmatch(text):
        return None
    return int(text)


def archive_key(snapshot_id: int) -> str:
    """Object key of a snapshot archive: ``backup-<id>.tar.gz``."""
    return f"{ARCHIVE_PREFIX}{snapshot_id}{ARCHIVE_SUFFIX}"


def archive_path(snapshot_id: int) -> str:
    """Bucket-absolute path of a snapshot archive: ``/backup-<id>.tar.gz``."""
    return "/" + archive_key(snapshot_id)


def parse_archive_key(key: str) -> int | None:
    """Parse the snapshot identifier out of an archive key.

    Args:
        key: Object key from the bucket listing.

    Returns:
        The identifier, or ``None`` if ``key`` is not a snapshot archive.
        Non-canonical bodies such as ``+7`` or ``007`` are not archives:
        ``archive_key()`` of the parsed id would name a different object.

    Examples:
        >>> parse_archive_key("backup-1700000000.tar.gz")
        1700000000
        >>> parse_archive_key("backup-latest.tar.gz") is None
        True
        >>> parse_archive_key("logs/backup-1.tar.gz") is None
        True
    """
    if not (key.startswith(ARCHIVE_PREFIX) and key.endswith(ARCHIVE_SUFFIX)):
        return None
    body = key[len(ARCHIVE_PREFIX):len(key) - len(ARCHIVE_SUFFIX)]
    snapshot_id = parse_id(body)
    # The id must name this exact key again, or restore would fetch another object
    if snapshot_id is None or archive_key(snapshot_id) != key:
        return None
    return snapshot_id


async def list_snapshots(store: ObjectStore) -> set[int]:
    """Fetch the set of snapshot identifiers held in the bucket.

    Keys that are not snapshot archives are ignored.

    Raises:
        RemoteStorageError: If the listing fails.
    """
    keys = await store.list_keys()
    snapshots: set[int] = set()
    for key in keys:
        snapshot_id = parse_archive_key(key)
        if snapshot_id is not None:
            snapshots.add(snapshot_id)
    return snapshots


def latest_snapshot(catalog: set[int]) -> int:
    """Most recent snapshot identifier in a non-empty catalog.

    Raises:
        ValidationError: If the catalog is empty.
    """
    if not catalog:
        raise ValidationError("empty backuped snapshots")
    return max(catalog)


def contains_snapshot(catalog: set[int], snapshot_id: int) -> bool:
    """Whether ``snapshot_id`` is present in the catalog."""
    return snapshot_id in catalog
