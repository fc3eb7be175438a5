"""Object store adapter backed by the ``aws`` command line client.

Uses ``aws s3 ls`` for the connectivity check, ``aws s3api list-objects``
for listings, and ``aws s3 cp`` for uploads and downloads.  Credentials
and region from ``StorageConfig`` are passed to the child process through
its environment, never on the command line.

Usage:
    from cassandra_backup.adapters.aws import AwsCliObjectStore

    store = AwsCliObjectStore(config.storage)
    await store.check_connection()
    keys = await store.list_keys()
"""

import json
import os
from pathlib import Path

from cassandra_backup.adapters.process import run_command
from cassandra_backup.config.models import StorageConfig
from cassandra_backup.errors import CommandError, ConnectivityError, RemoteStorageError


class AwsCliObjectStore:
    """``ObjectStore`` that shells out to the ``aws`` CLI.

    Args:
        storage: Bucket name, region, and credentials.
    """

    def __init__(self, storage: StorageConfig) -> None:
        self._storage = storage

    def _env(self) -> dict[str, str]:
        env = dict(os.environ)
        env.update(
            {
                "AWS_ACCESS_KEY_ID": self._storage.access_key_id,
                "AWS_SECRET_ACCESS_KEY": self._storage.secret_access_key,
                "AWS_DEFAULT_REGION": self._storage.region,
            }
        )
        return env

    async def _aws(self, *args: str) -> str:
        return await run_command(self._storage.aws_bin, *args, env=self._env())

    def _object_url(self, remote_path: str) -> str:
        if not remote_path.startswith("/"):
            raise RemoteStorageError(
                f"Remote path should start with /: {remote_path}"
            )
        return f"{self._storage.bucket_url}{remote_path}"

    async def check_connection(self) -> None:
        try:
            await self._aws("s3", "ls", self._storage.bucket_url)
        except CommandError as e:
            raise ConnectivityError(f"S3 connection error: {e}") from e

    async def list_keys(self) -> list[str]:
        try:
            output = await self._aws(
                "s3api", "list-objects",
                "--bucket", self._storage.bucket,
                "--output", "json",
            )
        except CommandError as e:
            raise RemoteStorageError(f"Error reading backups: {e}") from e

        if not output.strip():
            raise RemoteStorageError("Empty response from object listing")
        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            raise RemoteStorageError(f"Invalid object listing: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("Contents"), list):
            raise RemoteStorageError("Invalid object listing: no Contents field")

        return [
            item["Key"]
            for item in data["Contents"]
            if isinstance(item, dict) and isinstance(item.get("Key"), str)
        ]

    async def upload(self, local_path: Path, remote_path: str) -> None:
        url = self._object_url(remote_path)
        try:
            await self._aws("s3", "cp", str(local_path), url)
        except CommandError as e:
            raise RemoteStorageError(f"Send snapshot to storage error: {e}") from e

    async def download(self, remote_path: str, local_path: Path) -> Path:
        url = self._object_url(remote_path)
        try:
            await self._aws("s3", "cp", url, str(local_path))
        except CommandError as e:
            raise RemoteStorageError(f"Get backup file error: {e}") from e
        return local_path
