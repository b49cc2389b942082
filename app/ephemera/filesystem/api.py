"""Filesystem primitives used by managed entries.

Managed entries never touch the filesystem directly. They go through a
FilesystemAPI so that creation and removal can be observed or replaced
in tests. LocalFilesystem is the default implementation backed by
os, pathlib and shutil.
"""

import errno
import logging
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Any

logger = logging.getLogger(__name__)


class FilesystemAPI(ABC):
    """Abstract base class for the filesystem operations entries rely on.

    Implementations must keep standard semantics: creation fails with
    FileExistsError instead of overwriting, and removal fails with
    FileNotFoundError when the entry is absent.

    Example:
        >>> fs = LocalFilesystem()
        >>> fs.create_dir(Path("/tmp/example.dir"))
        >>> fs.remove_dir_recursive(Path("/tmp/example.dir"))
    """

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Check whether anything (including a dangling symlink) is at path."""

    @abstractmethod
    def is_dir(self, path: Path) -> bool:
        """Check whether path is a directory, without following a final symlink."""

    @abstractmethod
    def create_dir(self, path: Path) -> None:
        """Create a single directory.

        Raises:
            FileExistsError: If the path already exists.
            FileNotFoundError: If the parent directory is missing.
            OSError: For any other failure.
        """

    @abstractmethod
    def create_file_exclusive(self, path: Path) -> None:
        """Create an empty file, failing if the path already exists.

        Raises:
            FileExistsError: If the path already exists.
            OSError: For any other failure.
        """

    @abstractmethod
    def remove_file(self, path: Path) -> None:
        """Remove a single file.

        Raises:
            FileNotFoundError: If the path does not exist.
            OSError: For any other failure.
        """

    @abstractmethod
    def remove_dir_recursive(self, path: Path) -> None:
        """Remove a directory and everything below it.

        Raises:
            FileNotFoundError: If the path does not exist.
            OSError: If the tree could not be fully removed.
        """

    @abstractmethod
    def open_file(self, path: Path, mode: str = "r", encoding: str | None = None) -> IO[Any]:
        """Open a file for reading or writing."""


class LocalFilesystem(FilesystemAPI):
    """FilesystemAPI implementation for the local operating system.

    Attributes:
        _file_mode: Permission bits for newly created files.
        _dir_mode: Permission bits for newly created directories.
    """

    def __init__(self, file_mode: int = 0o600, dir_mode: int = 0o700) -> None:
        """Initialize the LocalFilesystem.

        Args:
            file_mode: Permission bits for files (private to the user by default).
            dir_mode: Permission bits for directories (private to the user by default).
        """
        self._file_mode = file_mode
        self._dir_mode = dir_mode

    def exists(self, path: Path) -> bool:
        return os.path.lexists(path)

    def is_dir(self, path: Path) -> bool:
        return os.path.isdir(path) and not os.path.islink(path)

    def create_dir(self, path: Path) -> None:
        os.mkdir(path, self._dir_mode)

    def create_file_exclusive(self, path: Path) -> None:
        flags = os.O_RDWR | os.O_CREAT | os.O_EXCL | getattr(os, "O_NOFOLLOW", 0)
        fd = os.open(path, flags, self._file_mode)
        os.close(fd)

    def remove_file(self, path: Path) -> None:
        Path(path).unlink()

    def remove_dir_recursive(self, path: Path) -> None:
        """Remove a directory tree, continuing past individual failures.

        Children that vanish while the tree is walked are ignored. Other
        failures do not stop removal of their siblings; the first one is
        re-raised once the walk is over. The result is verified: if the
        root still exists afterwards the removal counts as failed.

        Args:
            path: Root of the directory tree to remove.

        Raises:
            FileNotFoundError: If the root does not exist.
            OSError: If any part of the tree could not be removed.
        """
        target = Path(path)
        if not os.path.lexists(target):
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(target))

        # rmtree refuses symlinked roots; never follow one out of the tree
        if target.is_symlink():
            raise OSError(errno.ENOTDIR, "Refusing to remove symlink as a directory", str(target))

        errors: list[OSError] = []

        def _collect(function: Any, failed_path: str, exc: BaseException) -> None:
            if isinstance(exc, FileNotFoundError):
                return
            if isinstance(exc, OSError):
                logger.debug("Could not remove %s during tree removal: %s", failed_path, exc)
                errors.append(exc)
                return
            raise exc

        shutil.rmtree(target, onexc=_collect)

        if errors:
            raise errors[0]
        if os.path.lexists(target):
            raise OSError(errno.ENOTEMPTY, "Directory tree was not fully removed", str(target))

    def open_file(self, path: Path, mode: str = "r", encoding: str | None = None) -> IO[Any]:
        if "b" in mode:
            return open(path, mode)  # noqa: SIM115
        return open(path, mode, encoding=encoding or "utf-8")  # noqa: SIM115
