"""Managed entries: handles that own the deletion of one filesystem path.

A managed entry is created armed. When its scope ends (``close()``, usually
through a ``with`` block) the owned path is removed exactly once: a single
unlink for files, a recursive removal for directories. ``release()`` disarms
the entry and hands the path back to the caller instead.

Only one armed entry may own a given path at a time within the process.

Entries must be used as context managers or closed explicitly. An entry that
is neither closed nor released leaks its file or directory; there is no
finalizer-based cleanup.

State machine:
    ARMED --release()--> RELEASED
    ARMED --close()/remove()--> REMOVED
"""

from __future__ import annotations

import errno
import logging
import os
import threading
import weakref
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from types import TracebackType
from typing import IO, TYPE_CHECKING, Any, ClassVar, Self

from ephemera.core.errors import CleanupError, EntryStateError, FilesystemError
from ephemera.core.paths import absolute_base
from ephemera.filesystem.api import FilesystemAPI, LocalFilesystem
from ephemera.filesystem.diagnostics import CleanupDiagnostics, get_diagnostics
from ephemera.filesystem.models import CleanupOutcome, CleanupRecord, EntryKind

if TYPE_CHECKING:
    from ephemera.core.policy import NamingPolicy

logger = logging.getLogger(__name__)

# Armed entries keyed by absolute path; collected entries drop out on their own
_armed_owners: weakref.WeakValueDictionary[Path, ManagedEntry] = weakref.WeakValueDictionary()
_armed_owners_lock = threading.Lock()


class EntryState(str, Enum):
    """Lifecycle state of a managed entry.

    Attributes:
        ARMED: The path will be removed when the entry is closed.
        RELEASED: Ownership was handed back to the caller; nothing will be removed.
        REMOVED: Cleanup already ran (successfully or not).
    """

    ARMED = "armed"
    RELEASED = "released"
    REMOVED = "removed"


class ManagedEntry(ABC):
    """Exclusive owner of the deletion responsibility for one path.

    Attributes:
        kind: Kind of filesystem object this entry type owns.
    """

    kind: ClassVar[EntryKind]

    def __init__(
        self,
        path: Path,
        *,
        fs: FilesystemAPI | None = None,
        diagnostics: CleanupDiagnostics | None = None,
    ) -> None:
        """Initialize an armed entry over an already existing path.

        Use create_file()/create_directory() or adopt() rather than calling
        this directly.

        Args:
            path: Path of the filesystem object to own.
            fs: Filesystem collaborator. Defaults to LocalFilesystem.
            diagnostics: Channel for cleanup records. Defaults to get_diagnostics().

        Raises:
            EntryStateError: If another armed entry already owns the path.
        """
        self._path = Path(path)
        self._fs = fs if fs is not None else LocalFilesystem()
        self._diagnostics = diagnostics if diagnostics is not None else get_diagnostics()
        self._state = EntryState.ARMED
        self._claim()

    @property
    def path(self) -> Path:
        """The owned path; valid in every state."""
        return self._path

    @property
    def state(self) -> EntryState:
        return self._state

    @property
    def armed(self) -> bool:
        """Whether the path will be removed when the entry is closed."""
        return self._state is EntryState.ARMED

    @property
    def fs(self) -> FilesystemAPI:
        return self._fs

    @property
    def diagnostics(self) -> CleanupDiagnostics:
        return self._diagnostics

    @classmethod
    def adopt(
        cls,
        path: Path | str,
        *,
        fs: FilesystemAPI | None = None,
        diagnostics: CleanupDiagnostics | None = None,
    ) -> Self:
        """Take ownership of an existing path.

        This is the receiving side of an ownership transfer, e.g. turning a
        released directory's child into a file handle::

            report = ManagedFile.adopt(directory.release() / "report.txt")

        Args:
            path: Existing filesystem path to own.
            fs: Filesystem collaborator. Defaults to LocalFilesystem.
            diagnostics: Channel for cleanup records. Defaults to get_diagnostics().

        Returns:
            Armed entry owning the path.

        Raises:
            FilesystemError: If nothing exists at path, or it is the wrong kind
                of object for this entry type.
            EntryStateError: If another armed entry already owns the path.
        """
        filesystem = fs if fs is not None else LocalFilesystem()
        target = Path(path)
        if not filesystem.exists(target):
            error = FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(target))
            raise FilesystemError(f"Cannot adopt missing path {target}", target, error) from error

        wants_dir = cls.kind is EntryKind.DIRECTORY
        if filesystem.is_dir(target) != wants_dir:
            code = errno.ENOTDIR if wants_dir else errno.EISDIR
            error = OSError(code, os.strerror(code), str(target))
            msg = f"Cannot adopt {target} as a {cls.kind.value}"
            raise FilesystemError(msg, target, error) from error

        logger.debug("Adopted %s as managed %s", target, cls.kind.value)
        return cls(target, fs=filesystem, diagnostics=diagnostics)

    def release(self) -> Path:
        """Disarm the entry and hand the path back to the caller.

        After this call the entry never touches the filesystem again; the
        caller is responsible for the object (or leaks it on purpose).

        Returns:
            The owned path.

        Raises:
            EntryStateError: If the entry was already released or removed.
        """
        if self._state is not EntryState.ARMED:
            msg = f"Cannot release {self._path}: entry is {self._state.value}"
            raise EntryStateError(msg)
        self._state = EntryState.RELEASED
        self._unclaim()
        logger.debug("Released ownership of %s", self._path)
        return self._path

    def close(self) -> None:
        """Remove the owned path if the entry is still armed.

        The filesystem action runs at most once; later calls do nothing.
        Removal problems are never raised. A path that is already gone and
        a failed removal are both recorded on the diagnostics channel.
        """
        if self._state is not EntryState.ARMED:
            return
        self._state = EntryState.REMOVED
        self._unclaim()
        self._cleanup()

    def remove(self) -> None:
        """Remove the owned path now, surfacing failures.

        Like close(), but a failed removal raises instead of only being
        recorded. A path that is already gone counts as removed.

        Raises:
            EntryStateError: If the entry was already released or removed.
            CleanupError: If the path could not be removed.
        """
        if self._state is not EntryState.ARMED:
            msg = f"Cannot remove {self._path}: entry is {self._state.value}"
            raise EntryStateError(msg)
        self._state = EntryState.REMOVED
        self._unclaim()
        record, error = self._cleanup()
        if record.outcome is CleanupOutcome.FAILED and error is not None:
            raise CleanupError(self._path, error) from error

    def _claim(self) -> None:
        key = absolute_base(self._path)
        with _armed_owners_lock:
            owner = _armed_owners.get(key)
            if owner is not None and owner.armed:
                msg = f"Cannot own {key}: already owned by an armed {owner.kind.value} entry"
                raise EntryStateError(msg)
            _armed_owners[key] = self

    def _unclaim(self) -> None:
        key = absolute_base(self._path)
        with _armed_owners_lock:
            if _armed_owners.get(key) is self:
                del _armed_owners[key]

    def _cleanup(self) -> tuple[CleanupRecord, Exception | None]:
        error: Exception | None = None
        try:
            self._remove_path()
        except FileNotFoundError as e:
            logger.debug("Nothing to remove at %s: already gone", self._path)
            outcome, error = CleanupOutcome.MISSING, e
        except OSError as e:
            logger.warning("Failed to remove %s %s: %s", self.kind.value, self._path, e)
            outcome, error = CleanupOutcome.FAILED, e
        except Exception as e:
            # A faulty FilesystemAPI must not replace the error ending the scope
            logger.warning(
                "Failed to remove %s %s: %s", self.kind.value, self._path, e, exc_info=True
            )
            outcome, error = CleanupOutcome.FAILED, e
        else:
            logger.debug("Removed %s %s", self.kind.value, self._path)
            outcome = CleanupOutcome.REMOVED

        record = CleanupRecord(
            path=str(self._path),
            kind=self.kind,
            outcome=outcome,
            error=None if error is None else (str(error) or type(error).__name__),
        )
        if outcome is not CleanupOutcome.REMOVED:
            self._diagnostics.record(record)
        return record, error

    @abstractmethod
    def _remove_path(self) -> None:
        """Remove the owned filesystem object.

        Raises:
            FileNotFoundError: If the path does not exist.
            OSError: If removal failed.
        """

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        # Never suppresses: an in-flight exception propagates unchanged
        self.close()

    def __fspath__(self) -> str:
        return os.fspath(self._path)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self._path)!r}, state={self._state.value})"


class ManagedFile(ManagedEntry):
    """Managed entry owning a single file."""

    kind = EntryKind.FILE

    def open(self, mode: str = "r", encoding: str | None = None) -> IO[Any]:
        """Open the owned file through the filesystem collaborator.

        Args:
            mode: File mode, as for the builtin open().
            encoding: Text encoding (defaults to UTF-8 for text modes).

        Returns:
            File object; the caller closes it.
        """
        return self._fs.open_file(self._path, mode, encoding)

    def _remove_path(self) -> None:
        self._fs.remove_file(self._path)


class ManagedDirectory(ManagedEntry):
    """Managed entry owning a directory and everything below it.

    Files written inside the directory need no separate tracking: recursive
    removal takes them along. Nested managed entries are allowed too; if the
    directory goes first, their own cleanup finds the path gone and records
    a MISSING outcome instead of failing.
    """

    kind = EntryKind.DIRECTORY

    def join(self, *segments: str | os.PathLike[str]) -> Path:
        """Build a path below the owned directory.

        Pure path arithmetic: nothing is created and nothing new is owned.

        Args:
            *segments: Path components to append (e.g. "a", "b.txt" or "a/b.txt").

        Returns:
            The joined path.
        """
        return self._path.joinpath(*segments)

    def create_file(self, prefix: str = "", *, policy: NamingPolicy | None = None) -> ManagedFile:
        """Create a managed file directly inside this directory.

        Args:
            prefix: Cosmetic name prefix.
            policy: Naming policy. Defaults to get_default_policy().

        Returns:
            Armed ManagedFile sharing this entry's filesystem and diagnostics.
        """
        from ephemera.core.create import create_file

        return create_file(
            self._path, prefix, policy=policy, fs=self._fs, diagnostics=self._diagnostics
        )

    def create_directory(
        self, prefix: str = "", *, policy: NamingPolicy | None = None
    ) -> ManagedDirectory:
        """Create a managed subdirectory directly inside this directory.

        Args:
            prefix: Cosmetic name prefix.
            policy: Naming policy. Defaults to get_default_policy().

        Returns:
            Armed ManagedDirectory sharing this entry's filesystem and diagnostics.
        """
        from ephemera.core.create import create_directory

        return create_directory(
            self._path, prefix, policy=policy, fs=self._fs, diagnostics=self._diagnostics
        )

    def _remove_path(self) -> None:
        self._fs.remove_dir_recursive(self._path)
