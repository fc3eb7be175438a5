"""CLI module for the Cassandra backup agent.

Provides commands to back up this node once or on a schedule, restore a
snapshot from the bucket, and list the snapshots held there.

Usage:
    cassandra-backup single
    cassandra-backup start 3600
    cassandra-backup restore
    cassandra-backup restore 1700000000
    cassandra-backup snapshots

Commands:
    single     - Take one snapshot and upload it
    start      - Back up now, then every N seconds (default 10)
    restore    - Restore the latest or the given snapshot
    snapshots  - List snapshots in the bucket

Exit codes:
    0 - success
    1 - the backup or restore run failed
    2 - bad usage, missing configuration, or bucket unreachable
"""

import argparse
import asyncio
import logging
import os
import sys
from datetime import datetime, timezone

from rich.console import Console
from rich.table import Table

from cassandra_backup.backup.backup_restore import backup_node, parse_snapshot_id, restore_node
from cassandra_backup.catalog import archive_key, latest_snapshot, list_snapshots
from cassandra_backup.config.loader import load_agent_config
from cassandra_backup.config.models import AgentConfig
from cassandra_backup.errors import (
    BackupAgentError,
    ConfigurationError,
    ConnectivityError,
    ValidationError,
)
from cassandra_backup.factory import AgentAdapters, connect_and_validate, create_adapters
from cassandra_backup.scheduler import DEFAULT_INTERVAL_SECONDS, BackupScheduler

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_RUN_FAILED = 1
EXIT_SETUP_FAILED = 2


# ============================================================================
# Logging and setup helpers
# ============================================================================


def setup_logging(level_name: str) -> None:
    """Configure root logging for the agent process.

    Args:
        level_name: Level name such as ``"INFO"`` or ``"DEBUG"``.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    # Reduce noise from libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)


async def _setup() -> tuple[AgentConfig, AgentAdapters]:
    """Load configuration and confirm bucket connectivity.

    Raises:
        ConfigurationError: If required settings are missing.
        ConnectivityError: If the bucket is unreachable.
    """
    config = load_agent_config()
    if not config.data_file_directories:
        logger.warning(
            "No data_file_directories in %s/cassandra.yaml, nothing to back up",
            config.cassandra_config_dir,
        )
    adapters = await connect_and_validate(config, create_adapters(config))
    return config, adapters


def _report_setup_error(e: BackupAgentError) -> int:
    if isinstance(e, ConnectivityError):
        err_console.print(f"[bold red]x[/bold red] S3 connection error: {e}")
    else:
        err_console.print(f"[bold red]x[/bold red] Configuration error: {e}")
    return EXIT_SETUP_FAILED


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_single(args: argparse.Namespace) -> int:
    """Async implementation for single command.

    Returns:
        0 on success, 1 on a failed run, 2 on setup failure.
    """
    try:
        config, adapters = await _setup()
    except (ConfigurationError, ConnectivityError) as e:
        return _report_setup_error(e)

    try:
        result = await backup_node(
            config, adapters.snapshot_taker, adapters.archiver, adapters.store
        )
    except BackupAgentError as e:
        logger.error("Backup failed: %s", e)
        console.print(f"[bold red]x[/bold red] Backup failed: {e}")
        return EXIT_RUN_FAILED

    console.print(
        f"[bold green]v[/bold green] Backup created: "
        f"[bold cyan]{result.snapshot_id}[/bold cyan]"
    )
    console.print(
        f"  Tables: {len(result.tables_backed_up)} backed up, "
        f"{len(result.tables_skipped)} skipped"
    )
    return EXIT_OK


async def _async_start(args: argparse.Namespace) -> int:
    """Async implementation for start command.

    The first backup runs immediately and its failure ends the process;
    later failures are logged and the schedule continues.

    Returns:
        1 if the first run fails, 2 on setup failure.  Otherwise runs
        until interrupted.
    """
    try:
        config, adapters = await _setup()
    except (ConfigurationError, ConnectivityError) as e:
        return _report_setup_error(e)

    async def run() -> None:
        result = await backup_node(
            config, adapters.snapshot_taker, adapters.archiver, adapters.store
        )
        console.print(
            f"[bold green]v[/bold green] Backup created: "
            f"[bold cyan]{result.snapshot_id}[/bold cyan]"
        )

    scheduler = BackupScheduler(run, interval_seconds=args.interval)
    console.print(
        f"Backing up every [bold]{args.interval}[/bold] seconds", style="dim"
    )

    try:
        await scheduler.start()
    except BackupAgentError as e:
        logger.error("Backup failed: %s", e)
        console.print(f"[bold red]x[/bold red] Backup failed: {e}")
        return EXIT_RUN_FAILED

    return EXIT_OK


async def _async_restore(args: argparse.Namespace) -> int:
    """Async implementation for restore command.

    The snapshot argument is validated before configuration is loaded or
    the bucket is contacted.

    Returns:
        0 on success, 1 on a failed run, 2 on setup failure.
    """
    try:
        parse_snapshot_id(args.snapshot)
    except ValidationError as e:
        console.print(f"[bold red]x[/bold red] Restore failed: {e}")
        return EXIT_RUN_FAILED

    try:
        config, adapters = await _setup()
    except (ConfigurationError, ConnectivityError) as e:
        return _report_setup_error(e)

    try:
        result = await restore_node(
            config, adapters.archiver, adapters.store, requested_id=args.snapshot
        )
    except BackupAgentError as e:
        logger.error("Restore failed: %s", e)
        console.print(f"[bold red]x[/bold red] Restore failed: {e}")
        return EXIT_RUN_FAILED

    console.print(
        f"[bold green]v[/bold green] Backup restored: "
        f"[bold cyan]{result.snapshot_id}[/bold cyan]"
    )
    console.print(
        f"  Tables: {len(result.tables_restored)} restored, "
        f"{result.files_purged} live files removed"
    )
    if result.tables_without_snapshot:
        console.print(
            f"  [yellow]No snapshot for {len(result.tables_without_snapshot)} "
            f"tables (live data removed):[/yellow]"
        )
        for table_dir in result.tables_without_snapshot:
            console.print(f"    - {table_dir}")
    return EXIT_OK


async def _async_snapshots(args: argparse.Namespace) -> int:
    """Async implementation for snapshots command.

    Returns:
        0 on success, 1 if the listing fails, 2 on setup failure.
    """
    try:
        config, adapters = await _setup()
    except (ConfigurationError, ConnectivityError) as e:
        return _report_setup_error(e)

    try:
        catalog = await list_snapshots(adapters.store)
    except BackupAgentError as e:
        console.print(f"[red]Error: {e}[/red]")
        return EXIT_RUN_FAILED

    if not catalog:
        console.print("[yellow]No snapshots in bucket.[/yellow]")
        return EXIT_OK

    latest = latest_snapshot(catalog)

    table = Table(
        title=f"Snapshots in {config.storage.bucket}",
        show_header=True,
        header_style="bold",
    )
    table.add_column("", width=2)
    table.add_column("Snapshot")
    table.add_column("Taken (UTC)")
    table.add_column("Object key", style="dim")

    for snapshot_id in sorted(catalog, reverse=True):
        marker = "[bold green]*[/bold green]" if snapshot_id == latest else " "
        taken = datetime.fromtimestamp(snapshot_id, tz=timezone.utc)
        table.add_row(
            marker,
            str(snapshot_id),
            taken.strftime("%Y-%m-%d %H:%M:%S"),
            archive_key(snapshot_id),
        )

    console.print(table)
    console.print(f"\n[bold green]*[/bold green] = restored by default")
    return EXIT_OK


# ============================================================================
# Sync command wrappers
# ============================================================================


def cmd_single(args: argparse.Namespace) -> int:
    """Take one backup.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_single(args))


def cmd_start(args: argparse.Namespace) -> int:
    """Back up now and then on a fixed interval.

    Wraps the async implementation with ``asyncio.run()``.
    """
    try:
        return asyncio.run(_async_start(args))
    except KeyboardInterrupt:
        console.print("\nStopped.", style="dim")
        return EXIT_OK


def cmd_restore(args: argparse.Namespace) -> int:
    """Restore a snapshot.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_restore(args))


def cmd_snapshots(args: argparse.Namespace) -> int:
    """List snapshots in the bucket.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_snapshots(args))


# ============================================================================
# Main entry point
# ============================================================================


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for ``cassandra-backup``."""
    parser = argparse.ArgumentParser(
        prog="cassandra-backup",
        description="Snapshot backup and restore agent for a Cassandra node",
    )

    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        help="Logging level (default: $LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # single command
    p_single = subparsers.add_parser(
        "single",
        help="Take one snapshot and upload it",
    )
    p_single.set_defaults(func=cmd_single)

    # start command
    p_start = subparsers.add_parser(
        "start",
        help="Back up now, then repeat every INTERVAL seconds",
    )
    p_start.add_argument(
        "interval",
        nargs="?",
        type=_positive_int,
        default=DEFAULT_INTERVAL_SECONDS,
        help=f"Seconds between backups (default: {DEFAULT_INTERVAL_SECONDS})",
    )
    p_start.set_defaults(func=cmd_start)

    # restore command
    p_restore = subparsers.add_parser(
        "restore",
        help="Restore the latest or the given snapshot (deletes live data files)",
    )
    p_restore.add_argument(
        "snapshot",
        nargs="?",
        default=None,
        help="Snapshot id to restore (default: latest in bucket)",
    )
    p_restore.set_defaults(func=cmd_restore)

    # snapshots command
    p_snapshots = subparsers.add_parser(
        "snapshots",
        help="List snapshots in the bucket",
    )
    p_snapshots.set_defaults(func=cmd_snapshots)

    return parser


def main() -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
