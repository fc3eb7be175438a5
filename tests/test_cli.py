"""Tests for the cassandra-backup CLI.

Verifies that the CLI:
- Builds the single/start/restore/snapshots subcommands
- Wraps async implementations via ``asyncio.run()``
- Maps setup failures to exit code 2 and run failures to exit code 1
- Validates the restore snapshot id before loading configuration
"""

import argparse
import inspect
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from cassandra_backup.adapters.memory import HardLinkSnapshotTaker, InMemoryObjectStore
from cassandra_backup.adapters.tar import TarArchiver
from cassandra_backup.cli import (
    EXIT_OK,
    EXIT_RUN_FAILED,
    EXIT_SETUP_FAILED,
    _async_restore,
    _async_single,
    _async_snapshots,
    _async_start,
    build_parser,
    cmd_restore,
    cmd_single,
    cmd_snapshots,
    cmd_start,
    main,
)
from cassandra_backup.config.models import AgentConfig
from cassandra_backup.errors import ConfigurationError
from cassandra_backup.factory import AgentAdapters

SNAPSHOT_ID = 1700000000


def _adapters(
    config: AgentConfig,
    store: InMemoryObjectStore | None = None,
    fail_snapshot: bool = False,
) -> AgentAdapters:
    return AgentAdapters(
        snapshot_taker=HardLinkSnapshotTaker(
            config.data_file_directories, snapshot_id=SNAPSHOT_ID, fail=fail_snapshot
        ),
        archiver=TarArchiver(),
        store=store if store is not None else InMemoryObjectStore(),
    )


def _patched(config: AgentConfig, adapters: AgentAdapters):
    """Patch configuration loading and adapter construction."""
    return (
        patch("cassandra_backup.cli.load_agent_config", return_value=config),
        patch("cassandra_backup.cli.create_adapters", return_value=adapters),
    )


# ============================================================================
# Parser
# ============================================================================


class TestParser:
    """Verify subcommands and arguments."""

    def test_prog_name(self) -> None:
        assert build_parser().prog == "cassandra-backup"

    def test_single(self) -> None:
        args = build_parser().parse_args(["single"])
        assert args.command == "single"
        assert args.func is cmd_single

    def test_start_default_interval(self) -> None:
        args = build_parser().parse_args(["start"])
        assert args.interval == 10
        assert args.func is cmd_start

    def test_start_explicit_interval(self) -> None:
        assert build_parser().parse_args(["start", "3600"]).interval == 3600

    @pytest.mark.parametrize("value", ["0", "-1", "soon"])
    def test_start_rejects_bad_interval(self, value: str) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["start", value])

    def test_restore_defaults_to_latest(self) -> None:
        args = build_parser().parse_args(["restore"])
        assert args.snapshot is None
        assert args.func is cmd_restore

    def test_restore_keeps_raw_id(self) -> None:
        """The id is validated by the command, not by argparse."""
        assert build_parser().parse_args(["restore", "abc"]).snapshot == "abc"

    def test_snapshots(self) -> None:
        assert build_parser().parse_args(["snapshots"]).func is cmd_snapshots

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_log_level_option(self) -> None:
        args = build_parser().parse_args(["--log-level", "DEBUG", "single"])
        assert args.log_level == "DEBUG"

    def test_main_dispatches(self) -> None:
        with patch("sys.argv", ["cassandra-backup", "single"]), \
             patch("cassandra_backup.cli.setup_logging"), \
             patch("cassandra_backup.cli.cmd_single", return_value=0) as mock_single:
            assert main() == 0
        mock_single.assert_called_once()
        assert mock_single.call_args[0][0].command == "single"


class TestAsyncWrapping:
    """Verify cmd_* functions wrap async implementations."""

    @pytest.mark.parametrize("cmd", [cmd_single, cmd_start, cmd_restore, cmd_snapshots])
    def test_cmd_calls_asyncio_run(self, cmd) -> None:
        assert "asyncio.run" in inspect.getsource(cmd)
        assert not inspect.iscoroutinefunction(cmd)

    @pytest.mark.parametrize(
        "impl", [_async_single, _async_start, _async_restore, _async_snapshots]
    )
    def test_impl_is_async(self, impl) -> None:
        assert inspect.iscoroutinefunction(impl)

    def test_start_interrupt_exits_cleanly(self) -> None:
        with patch("cassandra_backup.cli._async_start", new=MagicMock()), \
             patch("cassandra_backup.cli.asyncio.run", side_effect=KeyboardInterrupt):
            assert cmd_start(argparse.Namespace(interval=10)) == EXIT_OK


# ============================================================================
# Exit codes
# ============================================================================


class TestSingle:
    """Verify the single command end to end."""

    def test_success(self, config: AgentConfig) -> None:
        store = InMemoryObjectStore()
        load, create = _patched(config, _adapters(config, store))
        with load, create:
            assert cmd_single(argparse.Namespace()) == EXIT_OK
        assert f"backup-{SNAPSHOT_ID}.tar.gz" in store.objects

    def test_missing_configuration(self) -> None:
        with patch(
            "cassandra_backup.cli.load_agent_config",
            side_effect=ConfigurationError("Environment variable AWS_BUCKET not defined"),
        ):
            assert cmd_single(argparse.Namespace()) == EXIT_SETUP_FAILED

    def test_bucket_unreachable(self, config: AgentConfig) -> None:
        store = InMemoryObjectStore(fail_on={"check_connection"})
        load, create = _patched(config, _adapters(config, store))
        with load, create:
            assert cmd_single(argparse.Namespace()) == EXIT_SETUP_FAILED
        assert store.calls == [("check_connection", "")]

    def test_run_failure(self, config: AgentConfig) -> None:
        load, create = _patched(config, _adapters(config, fail_snapshot=True))
        with load, create:
            assert cmd_single(argparse.Namespace()) == EXIT_RUN_FAILED


class TestStart:
    """Verify the start command's setup and first-run handling."""

    def test_first_run_failure(self, config: AgentConfig) -> None:
        load, create = _patched(config, _adapters(config, fail_snapshot=True))
        with load, create:
            assert cmd_start(argparse.Namespace(interval=10)) == EXIT_RUN_FAILED

    def test_uses_requested_interval(self, config: AgentConfig) -> None:
        scheduler = MagicMock()
        scheduler.start = AsyncMock()
        load, create = _patched(config, _adapters(config))
        with load, create, patch(
            "cassandra_backup.cli.BackupScheduler", return_value=scheduler
        ) as mock_cls:
            assert cmd_start(argparse.Namespace(interval=3600)) == EXIT_OK

        assert mock_cls.call_args.kwargs["interval_seconds"] == 3600
        scheduler.start.assert_awaited_once()

    def test_setup_failure(self) -> None:
        with patch(
            "cassandra_backup.cli.load_agent_config",
            side_effect=ConfigurationError("CASSANDRA_CONFIG not set"),
        ):
            assert cmd_start(argparse.Namespace(interval=10)) == EXIT_SETUP_FAILED


class TestRestore:
    """Verify the restore command."""

    def test_non_integer_id_fails_before_setup(self) -> None:
        with patch("cassandra_backup.cli.load_agent_config") as mock_load:
            assert cmd_restore(argparse.Namespace(snapshot="abc")) == EXIT_RUN_FAILED
        mock_load.assert_not_called()

    def test_absent_id(self, config: AgentConfig) -> None:
        store = InMemoryObjectStore({"backup-100.tar.gz": b"tgz"})
        load, create = _patched(config, _adapters(config, store))
        with load, create:
            assert cmd_restore(argparse.Namespace(snapshot="200")) == EXIT_RUN_FAILED

    def test_round_trip(self, config: AgentConfig, data_dir: Path) -> None:
        store = InMemoryObjectStore()
        load, create = _patched(config, _adapters(config, store))
        with load, create:
            assert cmd_single(argparse.Namespace()) == EXIT_OK
            (data_dir / "ks1" / "t2" / "c.db").unlink()
            assert cmd_restore(argparse.Namespace(snapshot=None)) == EXIT_OK
        assert (data_dir / "ks1" / "t2" / "c.db").read_text() == "charlie"

    def test_bucket_unreachable(self, config: AgentConfig) -> None:
        store = InMemoryObjectStore(fail_on={"check_connection"})
        load, create = _patched(config, _adapters(config, store))
        with load, create:
            assert cmd_restore(argparse.Namespace(snapshot=None)) == EXIT_SETUP_FAILED


class TestSnapshots:
    """Verify the snapshots listing command."""

    def test_lists_catalog(self, config: AgentConfig, capsys) -> None:
        store = InMemoryObjectStore(
            {"backup-100.tar.gz": b"", "backup-200.tar.gz": b"", "README": b""}
        )
        load, create = _patched(config, _adapters(config, store))
        with load, create:
            assert cmd_snapshots(argparse.Namespace()) == EXIT_OK
        out = capsys.readouterr().out
        assert "200" in out
        assert "backup-100.tar.gz" in out

    def test_no_archives(self, config: AgentConfig, capsys) -> None:
        store = InMemoryObjectStore({"README": b""})
        load, create = _patched(config, _adapters(config, store))
        with load, create:
            assert cmd_snapshots(argparse.Namespace()) == EXIT_OK
        assert "No snapshots" in capsys.readouterr().out

    def test_listing_failure(self, config: AgentConfig) -> None:
        load, create = _patched(config, _adapters(config, InMemoryObjectStore()))
        with load, create:
            assert cmd_snapshots(argparse.Namespace()) == EXIT_RUN_FAILED
