"""Filesystem domain models for managed entries and their cleanup.

This module defines the core data structures describing what kind of
filesystem object a managed entry owns and how its removal turned out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class EntryKind(str, Enum):
    """Type of filesystem object owned by a managed entry.

    Attributes:
        FILE: Regular file, removed with a single unlink.
        DIRECTORY: Directory, removed recursively with all its contents.
    """

    FILE = "file"
    DIRECTORY = "directory"


class CleanupOutcome(str, Enum):
    """Result of removing the path owned by a managed entry.

    Attributes:
        REMOVED: The path existed and was removed.
        MISSING: The path was already gone (e.g. removed by a parent directory).
        FAILED: Removal raised an error; the object may still be on disk.
    """

    REMOVED = "removed"
    MISSING = "missing"
    FAILED = "failed"


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(frozen=True, slots=True)
class CleanupRecord:
    """Record of a single cleanup attempt.

    Attributes:
        path: Absolute path that was operated on.
        kind: Kind of filesystem object the entry owned.
        outcome: How the removal turned out.
        error: Error message if the removal did not succeed, None otherwise.
        timestamp: When the removal was attempted (ISO 8601, UTC).
    """

    path: str
    kind: EntryKind
    outcome: CleanupOutcome
    error: str | None = None
    timestamp: str = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if self.outcome is CleanupOutcome.FAILED and not self.error:
            msg = "Failed cleanup records must carry an error message"
            raise ValueError(msg)

    @property
    def success(self) -> bool:
        """Check if the path is gone from disk after this attempt."""
        return self.outcome is not CleanupOutcome.FAILED

