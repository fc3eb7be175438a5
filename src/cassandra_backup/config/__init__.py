"""Configuration management: environment loading, cassandra.yaml, and models.

Usage:
    >>> from cassandra_backup.config import load_agent_config, AgentConfig
"""

from cassandra_backup.config.loader import load_agent_config, load_data_file_directories
from cassandra_backup.config.models import AgentConfig, StorageConfig

__all__ = [
    "load_agent_config",
    "load_data_file_directories",
    "AgentConfig",
    "StorageConfig",
]
