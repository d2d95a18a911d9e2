"""Exceptions raised while migrating price snapshots."""

from __future__ import annotations


class MigrationError(RuntimeError):
    """Base class for every fatal migration failure."""


class MigrationConfigError(MigrationError):
    """Raised when required settings are missing or invalid."""


class SourceUnavailable(MigrationError):
    """Raised when the snapshot root directory cannot be used."""


class MalformedSnapshotName(MigrationError):
    """Raised when a snapshot directory name is not a timestamp."""

    def __init__(self, name: str):
        super().__init__(
            f"Failed to parse date from folder name: {name!r} "
            "(expected YYYY-MM-DD_hh-mm-ss)"
        )
        self.name = name


class SnapshotOpenError(MigrationError):
    """Raised when a snapshot database cannot be opened or read."""


class TargetConnectionError(MigrationError):
    """Raised when the target database cannot be reached."""


class IdentityResolutionError(MigrationError):
    """Raised when a category or product cannot be looked up or created."""


class WriteError(MigrationError):
    """Raised when a price observation cannot be stored."""


__all__ = [
    "MigrationError",
    "MigrationConfigError",
    "SourceUnavailable",
    "MalformedSnapshotName",
    "SnapshotOpenError",
    "TargetConnectionError",
    "IdentityResolutionError",
    "WriteError",
]
