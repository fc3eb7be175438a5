"""Shared fixtures: a small Cassandra-style data tree under tmp_path."""

from pathlib import Path

import pytest

from cassandra_backup.config.models import AgentConfig, StorageConfig


def make_config(root: Path, data_dirs: list[Path]) -> AgentConfig:
    """AgentConfig rooted at ``root`` with the given topology."""
    return AgentConfig(
        cassandra_config_dir=str(root / "conf"),
        data_file_directories=[str(d) for d in data_dirs],
        storage=StorageConfig(
            bucket="node-backups",
            region="eu-west-1",
            access_key_id="AKIATEST",
            secret_access_key="s3cr3t",
        ),
        root=str(root),
    )


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Data root with two populated tables and one empty table.

    Layout::

        data/ks1/t1/{a.db, b.db, snapshots/}
        data/ks1/t2/{c.db, snapshots/}
        data/ks2/t3/{snapshots/}
    """
    root = tmp_path / "data"
    t1 = root / "ks1" / "t1"
    t2 = root / "ks1" / "t2"
    t3 = root / "ks2" / "t3"
    for table in (t1, t2, t3):
        (table / "snapshots").mkdir(parents=True)
    (t1 / "a.db").write_text("alpha")
    (t1 / "b.db").write_text("bravo")
    (t2 / "c.db").write_text("charlie")
    return root


@pytest.fixture
def config(tmp_path: Path, data_dir: Path) -> AgentConfig:
    return make_config(tmp_path, [data_dir])


@pytest.fixture
def config_factory():
    """Build an AgentConfig for an arbitrary root and topology."""
    return make_config
