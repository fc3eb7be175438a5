"""Configuration loading from the environment and cassandra.yaml."""

import os
from collections.abc import Mapping
from pathlib import Path

import yaml

from cassandra_backup.config.models import AgentConfig, StorageConfig
from cassandra_backup.errors import ConfigurationError

CASSANDRA_CONFIG_ENV = "CASSANDRA_CONFIG"
CASSANDRA_YAML = "cassandra.yaml"

# Required object storage variables, in the order they are checked
STORAGE_ENV_VARS = (
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_DEFAULT_REGION",
    "AWS_BUCKET",
)


def load_data_file_directories(
    config_dir: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> list[str]:
    """Read the data file directories from ``cassandra.yaml``.

    Args:
        config_dir: Directory holding ``cassandra.yaml``.  When ``None``,
            taken from the ``CASSANDRA_CONFIG`` environment variable.
        env: Environment mapping (default: ``os.environ``).

    Returns:
        Configured data directory roots, in file order.  Empty when
        ``data_file_directories`` is absent or not a list; non-string
        entries are dropped.

    Raises:
        ConfigurationError: If ``CASSANDRA_CONFIG`` is unset, the file
            cannot be read, or it is not valid YAML.

    Example:
        >>> load_data_file_directories("/etc/cassandra")
        ['/var/lib/cassandra/data']
    """
    env = os.environ if env is None else env

    if config_dir is None:
        config_dir = env.get(CASSANDRA_CONFIG_ENV, "")
    if not str(config_dir):
        raise ConfigurationError(
            f"{CASSANDRA_CONFIG_ENV} not set, is cassandra installed?"
        )

    config_path = Path(config_dir) / CASSANDRA_YAML
    try:
        content = config_path.read_text()
    except OSError as e:
        raise ConfigurationError(f"{CASSANDRA_YAML} file read error: {e}") from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"{CASSANDRA_YAML} format error: {e}") from e

    if not isinstance(data, dict):
        return []

    dirs = data.get("data_file_directories")
    if not isinstance(dirs, list):
        return []

    return [d for d in dirs if isinstance(d, str)]


def load_agent_config(env: Mapping[str, str] | None = None) -> AgentConfig:
    """Build the agent configuration from environment variables.

    Reads ``CASSANDRA_CONFIG`` (and the topology it points to) plus the four
    ``AWS_*`` storage variables.  Optional overrides: ``BACKUP_ROOT``,
    ``NODETOOL_BIN``, ``TAR_BIN``, ``AWS_BIN``.

    Args:
        env: Environment mapping (default: ``os.environ``).

    Returns:
        Populated ``AgentConfig``.

    Raises:
        ConfigurationError: If a required variable is missing or
            ``cassandra.yaml`` cannot be loaded.
    """
    env = os.environ if env is None else env

    config_dir = env.get(CASSANDRA_CONFIG_ENV, "")
    data_dirs = load_data_file_directories(config_dir, env=env)

    values = {}
    for name in STORAGE_ENV_VARS:
        value = env.get(name, "")
        if not value:
            raise ConfigurationError(f"Environment variable {name} not defined")
        values[name] = value

    storage = StorageConfig(
        bucket=values["AWS_BUCKET"],
        region=values["AWS_DEFAULT_REGION"],
        access_key_id=values["AWS_ACCESS_KEY_ID"],
        secret_access_key=values["AWS_SECRET_ACCESS_KEY"],
        aws_bin=env.get("AWS_BIN") or "aws",
    )

    return AgentConfig(
        cassandra_config_dir=config_dir,
        data_file_directories=data_dirs,
        storage=storage,
        root=env.get("BACKUP_ROOT") or "/",
        nodetool_bin=env.get("NODETOOL_BIN") or "nodetool",
        tar_bin=env.get("TAR_BIN") or "tar",
    )
