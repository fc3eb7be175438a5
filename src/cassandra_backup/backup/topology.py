"""Walk of the root -> keyspace -> table directory topology."""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

SNAPSHOTS_DIR = "snapshots"


def _subdirs(path: Path) -> list[Path]:
    # Unreadable levels are skipped, not fatal
    try:
        entries = sorted(path.iterdir())
    except OSError as e:
        logger.debug("Cannot list %s: %s", path, e)
        return []
    return [p for p in entries if p.is_dir() and not p.is_symlink()]


def iter_table_dirs(data_file_directories: Iterable[str]) -> Iterator[Path]:
    """Yield every table directory under the configured roots.

    Roots are visited in configuration order; keyspaces and tables in name
    order.  Only real directories count at the keyspace and table levels;
    symlinks to directories are not followed.

    Args:
        data_file_directories: Topology roots from ``cassandra.yaml``.

    Yields:
        ``<root>/<keyspace>/<table>`` paths.
    """
    for root in data_file_directories:
        for keyspace_dir in _subdirs(Path(root)):
            yield from _subdirs(keyspace_dir)


def table_label(table_dir: Path) -> str:
    """Short ``keyspace.table`` label for logs and results."""
    return f"{table_dir.parent.name}.{table_dir.name}"
