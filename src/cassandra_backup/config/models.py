"""Pydantic models for agent configuration."""

from pathlib import Path

from pydantic import BaseModel, Field


class StorageConfig(BaseModel):
    """Object storage settings read from the AWS_* environment variables."""

    bucket: str
    region: str
    access_key_id: str
    secret_access_key: str = Field(repr=False)
    aws_bin: str = "aws"

    @property
    def bucket_url(self) -> str:
        """``s3://`` URL of the bucket root (no trailing slash)."""
        return f"s3://{self.bucket}"


class AgentConfig(BaseModel):
    """Complete configuration for one agent process.

    Built once at startup and passed explicitly into the orchestrators.
    ``root`` is where staging directories, local archives, and archive
    extraction live; it is ``/`` in production.
    """

    cassandra_config_dir: str
    data_file_directories: list[str] = Field(default_factory=list)
    storage: StorageConfig
    root: str = "/"
    nodetool_bin: str = "nodetool"
    tar_bin: str = "tar"

    @property
    def root_path(self) -> Path:
        return Path(self.root)

    def staging_dir(self, snapshot_id: int) -> Path:
        """Staging directory for a backup run: ``<root>/backup-<id>``."""
        return self.root_path / f"backup-{snapshot_id}"

    def local_archive(self, snapshot_id: int) -> Path:
        """Local archive path: ``<root>/backup-<id>.tar.gz``."""
        return self.root_path / f"backup-{snapshot_id}.tar.gz"
