"""Snapshot errors."""


class BackupError(Exception):
    """Raised when a snapshot cannot be written or read."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class CorruptBackupError(BackupError):
    """Raised when a snapshot file is unreadable or lacks its record list."""

    pass
