"""Adapter factory.

Builds the production adapters for an ``AgentConfig`` and confirms the
bucket is reachable before any backup or restore starts.

Usage:
    from cassandra_backup.factory import connect_and_validate, create_adapters

    adapters = await connect_and_validate(config)
"""

import logging
from dataclasses import dataclass

from cassandra_backup.adapters.aws import AwsCliObjectStore
from cassandra_backup.adapters.base import Archiver, ObjectStore, SnapshotTaker
from cassandra_backup.adapters.nodetool import NodetoolSnapshotTaker
from cassandra_backup.adapters.tar import TarArchiver
from cassandra_backup.config.models import AgentConfig

logger = logging.getLogger(__name__)


@dataclass
class AgentAdapters:
    """The three external tools an agent run needs."""

    snapshot_taker: SnapshotTaker
    archiver: Archiver
    store: ObjectStore


def create_adapters(config: AgentConfig) -> AgentAdapters:
    """Create the shell-out adapters configured by ``config``.

    No command is run here; see ``connect_and_validate()``.
    """
    return AgentAdapters(
        snapshot_taker=NodetoolSnapshotTaker(nodetool_bin=config.nodetool_bin),
        archiver=TarArchiver(tar_bin=config.tar_bin),
        store=AwsCliObjectStore(config.storage),
    )


async def connect_and_validate(
    config: AgentConfig,
    adapters: AgentAdapters | None = None,
) -> AgentAdapters:
    """Create adapters (unless given) and confirm the bucket can be listed.

    Args:
        config: Agent configuration.
        adapters: Pre-built adapters, e.g. in-memory ones in tests.

    Returns:
        The adapters, ready for ``backup_node()``/``restore_node()``.

    Raises:
        ConnectivityError: If the bucket is unreachable.

    Example:
        >>> adapters = await connect_and_validate(load_agent_config())
    """
    if adapters is None:
        adapters = create_adapters(config)

    await adapters.store.check_connection()
    logger.info("Connected to bucket %s", config.storage.bucket)
    return adapters
