"""Exception hierarchy for ephemera.

Creation errors are always raised to the caller. Cleanup errors are only
raised by an explicit ``remove()``; scope-exit cleanup records them on the
diagnostics channel instead.
"""

from pathlib import Path


class EphemeraError(Exception):
    """Base exception for all ephemera errors."""


class CollisionExhaustedError(EphemeraError):
    """Raised when no vacant name was found within the attempt budget.

    Attributes:
        base: Directory the candidates were generated in.
        prefix: Name prefix that was requested.
        attempts: Number of candidates that were tried.
    """

    def __init__(self, base: Path, prefix: str, attempts: int) -> None:
        self.base = base
        self.prefix = prefix
        self.attempts = attempts
        super().__init__(
            f"Failed to find a vacant name for prefix {prefix!r} in {base} "
            f"after {attempts} attempts"
        )


class FilesystemError(EphemeraError):
    """Raised when the underlying filesystem rejects an operation.

    Always chained to the original OSError via ``raise ... from``.

    Attributes:
        path: Path the operation was attempted on.
        errno: errno of the underlying OSError, if any.
        kind: Name of the underlying OSError subclass (e.g. "PermissionError").
    """

    def __init__(self, message: str, path: Path, error: OSError) -> None:
        self.path = path
        self.errno = error.errno
        self.kind = type(error).__name__
        super().__init__(message)


class CleanupError(EphemeraError):
    """Raised when an explicit removal of a managed path fails.

    Attributes:
        path: Path that could not be removed.
        kind: Name of the underlying exception type.
    """

    def __init__(self, path: Path, error: Exception) -> None:
        self.path = path
        self.kind = type(error).__name__
        super().__init__(f"Failed to remove {path}: {error}")


class EntryStateError(EphemeraError):
    """Raised when an operation is not valid in the entry's current state."""
