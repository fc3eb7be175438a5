"""In-process adapters for tests and dry runs.

``InMemoryObjectStore`` keeps objects in a dict and can be told to fail
specific operations.  ``HardLinkSnapshotTaker`` imitates ``nodetool
snapshot`` on a local directory tree: every table directory that holds
data files gets a ``snapshots/<id>`` directory of hard links to them.
Tables without data files get no snapshot, as with the real engine.

Usage:
    from cassandra_backup.adapters.memory import HardLinkSnapshotTaker, InMemoryObjectStore

    store = InMemoryObjectStore()
    taker = HardLinkSnapshotTaker(["/tmp/data"], snapshot_id=1700000000)
"""

import os
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from cassandra_backup.errors import ConnectivityError, RemoteStorageError, SnapshotError


class InMemoryObjectStore:
    """Dict-backed ``ObjectStore``.

    Args:
        objects: Initial ``{key: bytes}`` contents (keys without leading ``/``).
        fail_on: Operation names that raise instead of succeeding.  Any of
            ``"check_connection"``, ``"list_keys"``, ``"upload"``,
            ``"download"``.

    Attributes:
        objects: Current bucket contents.
        calls: ``(operation, argument)`` tuples in call order.
    """

    def __init__(
        self,
        objects: dict[str, bytes] | None = None,
        fail_on: Iterable[str] = (),
    ) -> None:
        self.objects: dict[str, bytes] = dict(objects or {})
        self.fail_on: set[str] = set(fail_on)
        self.calls: list[tuple[str, str]] = []

    def _maybe_fail(self, operation: str, error: type[Exception]) -> None:
        if operation in self.fail_on:
            raise error(f"{operation} failed (injected)")

    @staticmethod
    def _key(remote_path: str) -> str:
        if not remote_path.startswith("/"):
            raise RemoteStorageError(
                f"Remote path should start with /: {remote_path}"
            )
        return remote_path.lstrip("/")

    async def check_connection(self) -> None:
        self.calls.append(("check_connection", ""))
        self._maybe_fail("check_connection", ConnectivityError)

    async def list_keys(self) -> list[str]:
        self.calls.append(("list_keys", ""))
        self._maybe_fail("list_keys", RemoteStorageError)
        # An empty bucket yields an empty listing response from S3
        if not self.objects:
            raise RemoteStorageError("Empty response from object listing")
        return sorted(self.objects)

    async def upload(self, local_path: Path, remote_path: str) -> None:
        self.calls.append(("upload", remote_path))
        key = self._key(remote_path)
        self._maybe_fail("upload", RemoteStorageError)
        self.objects[key] = Path(local_path).read_bytes()

    async def download(self, remote_path: str, local_path: Path) -> Path:
        self.calls.append(("download", remote_path))
        key = self._key(remote_path)
        self._maybe_fail("download", RemoteStorageError)
        if key not in self.objects:
            raise RemoteStorageError(f"No such object: {key}")
        Path(local_path).write_bytes(self.objects[key])
        return Path(local_path)


class HardLinkSnapshotTaker:
    """``SnapshotTaker`` that hard-links table files into ``snapshots/<id>``.

    Args:
        data_file_directories: Topology roots to snapshot.
        snapshot_id: Fixed identifier to use; when ``None`` the current
            epoch second from ``clock`` is used.
        clock: Time source (default ``time.time``).
        fail: When ``True``, ``take_snapshot`` raises ``SnapshotError``.
    """

    def __init__(
        self,
        data_file_directories: Iterable[str],
        snapshot_id: int | None = None,
        clock: Callable[[], float] = time.time,
        fail: bool = False,
    ) -> None:
        self._data_dirs = [Path(d) for d in data_file_directories]
        self._snapshot_id = snapshot_id
        self._clock = clock
        self._fail = fail

    async def take_snapshot(self) -> int:
        if self._fail:
            raise SnapshotError("Snapshot failed (injected)")

        snapshot_id = self._snapshot_id
        if snapshot_id is None:
            snapshot_id = int(self._clock())

        for root in self._data_dirs:
            if not root.is_dir():
                continue
            for table_dir in sorted(p for p in root.glob("*/*") if p.is_dir()):
                files = sorted(p for p in table_dir.iterdir() if p.is_file())
                if not files:
                    continue
                target = table_dir / "snapshots" / str(snapshot_id)
                target.mkdir(parents=True, exist_ok=True)
                for data_file in files:
                    os.link(data_file, target / data_file.name)

        return snapshot_id
