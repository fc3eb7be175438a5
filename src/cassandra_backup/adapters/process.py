"""Async subprocess helper shared by the shell-out adapters."""

import asyncio
import logging

from cassandra_backup.errors import CommandError

logger = logging.getLogger(__name__)


async def run_command(*argv: str, env: dict[str, str] | None = None) -> str:
    """Run a command to completion and return its standard output.

    Args:
        *argv: Program and arguments (no shell is involved).
        env: Optional full environment for the child process.

    Returns:
        Decoded standard output.

    Raises:
        CommandError: If the process exits non-zero or cannot be started.
    """
    logger.debug("Running %s", " ".join(argv))
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
        )
    except OSError as e:
        # Missing executable or permission problem
        raise CommandError(list(argv), 127, str(e)) from e

    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        raise CommandError(
            list(argv), proc.returncode, stderr.decode(errors="replace")
        )
    return stdout.decode(errors="replace")
