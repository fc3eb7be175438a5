"""Recurring backup scheduler.

Runs one backup immediately, then one per tick of a fixed-rate timer.  A
failure of the first run propagates to the caller; failures of later runs
are logged and the schedule continues.

Runs never overlap: the loop awaits each run before waiting for the next
tick, and ticks that fall while a run is still in flight are dropped, the
way a dropped-tick timer behaves.  A run longer than the interval
therefore delays the schedule rather than stacking runs.

Usage:
    scheduler = BackupScheduler(lambda: backup_node(config, taker, archiver, store),
                                interval_seconds=3600)
    await scheduler.start()
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 10


class BackupScheduler:
    """Drives a backup callable once or on a fixed interval.

    Args:
        run_backup: Zero-argument coroutine function performing one backup.
        interval_seconds: Seconds between tick starts.
        clock: Monotonic time source (default ``time.monotonic``).
        sleep: Async sleep (default ``asyncio.sleep``).

    Example:
        >>> scheduler = BackupScheduler(run, interval_seconds=60)
        >>> await scheduler.start()      # runs until stop()
    """

    def __init__(
        self,
        run_backup: Callable[[], Awaitable[Any]],
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self.run_backup = run_backup
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._sleep = sleep

        self._running = False
        self._run_count = 0
        self._failure_count = 0

    async def run_once(self) -> Any:
        """Run a single backup; errors propagate."""
        result = await self.run_backup()
        self._run_count += 1
        return result

    async def start(self, max_runs: int | None = None) -> None:
        """Run the schedule until ``stop()`` or ``max_runs`` runs.

        Args:
            max_runs: Stop after this many runs, counting the first one.

        Raises:
            Exception: Whatever the first run raises.
        """
        if self._running:
            logger.warning("Scheduler already running")
            return

        self._running = True
        logger.info(
            "Starting backup schedule",
            extra={"interval_seconds": self.interval_seconds},
        )

        try:
            await self.run_once()
            runs = 1
            next_tick = self._clock() + self.interval_seconds

            while self._running and (max_runs is None or runs < max_runs):
                delay = next_tick - self._clock()
                if delay > 0:
                    await self._sleep(delay)
                if not self._running:
                    break

                try:
                    await self.run_once()
                except Exception as e:
                    self._failure_count += 1
                    logger.error(f"Scheduled backup failed: {e}", exc_info=True)
                runs += 1

                # Skip ticks that passed while the run was in flight
                now = self._clock()
                next_tick += self.interval_seconds
                while next_tick <= now:
                    next_tick += self.interval_seconds
        finally:
            self._running = False

    def stop(self) -> None:
        """Stop the schedule after the current run."""
        self._running = False
        logger.info("Stopping backup schedule")

    @property
    def stats(self) -> dict[str, Any]:
        """Get scheduler statistics."""
        return {
            "running": self._running,
            "run_count": self._run_count,
            "failure_count": self._failure_count,
        }
