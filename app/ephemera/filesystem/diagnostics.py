"""Cleanup diagnostics channel.

Scope-exit cleanup must never raise, so failed or no-op removals are
recorded here instead. Applications can inspect the records, drain them
periodically, or subscribe a callback to forward them elsewhere.
"""

import logging
import threading
from collections import deque
from collections.abc import Callable

from ephemera.filesystem.models import CleanupRecord

logger = logging.getLogger(__name__)

CleanupSubscriber = Callable[[CleanupRecord], None]

# Oldest records are dropped beyond this many
DEFAULT_MAX_RECORDS = 1000


class CleanupDiagnostics:
    """Thread-safe, bounded in-memory store of cleanup records.

    Example:
        >>> diagnostics = CleanupDiagnostics()
        >>> with create_directory(prefix="job", diagnostics=diagnostics) as d:
        ...     ...
        >>> diagnostics.failures()
        []
    """

    def __init__(self, max_records: int = DEFAULT_MAX_RECORDS) -> None:
        """Initialize the CleanupDiagnostics.

        Args:
            max_records: Maximum number of records kept in memory.

        Raises:
            ValueError: If max_records is not positive.
        """
        if max_records < 1:
            msg = f"max_records must be positive, got {max_records}"
            raise ValueError(msg)
        self._records: deque[CleanupRecord] = deque(maxlen=max_records)
        self._subscribers: list[CleanupSubscriber] = []
        self._lock = threading.Lock()

    def record(self, record: CleanupRecord) -> None:
        """Store a cleanup record and notify subscribers.

        A subscriber that raises is logged and skipped; it never affects
        the cleanup that produced the record.

        Args:
            record: The cleanup record to store.
        """
        with self._lock:
            self._records.append(record)
            subscribers = list(self._subscribers)

        for subscriber in subscribers:
            try:
                subscriber(record)
            except Exception:
                logger.warning(
                    "Cleanup diagnostics subscriber %r failed for %s",
                    subscriber,
                    record.path,
                    exc_info=True,
                )

    @property
    def records(self) -> list[CleanupRecord]:
        """Snapshot of all stored records, oldest first."""
        with self._lock:
            return list(self._records)

    def failures(self) -> list[CleanupRecord]:
        """Return only records whose removal failed."""
        return [r for r in self.records if not r.success]

    def drain(self) -> list[CleanupRecord]:
        """Return all stored records and clear the store."""
        with self._lock:
            drained = list(self._records)
            self._records.clear()
        return drained

    def clear(self) -> None:
        """Discard all stored records."""
        with self._lock:
            self._records.clear()

    def subscribe(self, callback: CleanupSubscriber) -> None:
        """Register a callback invoked for every new record."""
        with self._lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)

    def unsubscribe(self, callback: CleanupSubscriber) -> None:
        """Remove a previously registered callback (no-op if unknown)."""
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


_default_diagnostics = CleanupDiagnostics()


def get_diagnostics() -> CleanupDiagnostics:
    """Get the process-wide diagnostics channel used by default.

    Returns:
        The shared CleanupDiagnostics instance.
    """
    return _default_diagnostics
