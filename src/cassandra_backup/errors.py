"""Exception hierarchy for backup and restore runs.

Every failure an orchestrator can hit maps to one of these classes.  The
orchestrators only raise -- choosing an exit code is left to the CLI.

Usage:
    from cassandra_backup.errors import BackupAgentError, ValidationError

    try:
        await restore_node(config, archiver, store, requested_id="abc")
    except ValidationError as e:
        console.print(f"[red]{e}[/red]")
"""


class BackupAgentError(Exception):
    """Base class for all backup agent errors."""

    pass


class ConfigurationError(BackupAgentError):
    """Raised when required configuration is missing or unreadable."""

    pass


class ConnectivityError(BackupAgentError):
    """Raised when the object store bucket cannot be reached at startup."""

    pass


class SnapshotError(BackupAgentError):
    """Raised when the database snapshot command fails."""

    pass


class DirectoryOperationError(BackupAgentError):
    """Raised when a create, move, chown, or delete on the filesystem fails."""

    pass


class ArchiveError(BackupAgentError):
    """Raised when compressing or extracting an archive fails."""

    pass


class RemoteStorageError(BackupAgentError):
    """Raised when listing, uploading, or downloading from the bucket fails."""

    pass


class ValidationError(BackupAgentError):
    """Raised for a malformed or unknown snapshot id, or an empty catalog."""

    pass


class CommandError(BackupAgentError):
    """Raised when an external command exits non-zero.

    Adapters catch this and re-raise the domain error for their concern
    (``SnapshotError``, ``ArchiveError``, ``RemoteStorageError``), keeping
    the command details in the message.

    Attributes:
        argv: Command line that was executed.
        returncode: Process exit status.
        stderr: Decoded standard error output.
    """

    def __init__(self, argv: list[str], returncode: int, stderr: str = "") -> None:
        self.argv = argv
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        super().__init__(
            f"'{' '.join(argv)}' exited with status {returncode}{detail}"
        )
