"""Creation of managed files and directories.

Candidates from a PathGenerator are tried one after another with an
exclusive create. A candidate that already exists is skipped; any other
filesystem failure aborts at once, since retrying cannot fix a missing
base directory, a permission problem or a full disk.
"""

import logging
import random
from collections.abc import Callable
from itertools import islice
from pathlib import Path
from typing import TypeVar

from ephemera.core.entry import ManagedDirectory, ManagedEntry, ManagedFile
from ephemera.core.errors import CollisionExhaustedError, FilesystemError
from ephemera.core.naming import PathGenerator
from ephemera.core.paths import get_scratch_dir
from ephemera.core.policy import NamingPolicy, get_default_policy
from ephemera.filesystem.api import FilesystemAPI, LocalFilesystem
from ephemera.filesystem.diagnostics import CleanupDiagnostics

logger = logging.getLogger(__name__)

EntryT = TypeVar("EntryT", bound=ManagedEntry)


def resolve_base(base: Path | str | None, policy: NamingPolicy) -> Path:
    """Pick the directory new entries are created in.

    Args:
        base: Explicit base directory, if the caller gave one.
        policy: Naming policy, consulted for a configured base_dir.

    Returns:
        base if given, else policy.base_dir, else the scratch directory.
    """
    if base is not None:
        return Path(base)
    if policy.base_dir is not None:
        return policy.base_dir
    return get_scratch_dir()


def _create(
    entry_type: type[EntryT],
    make: Callable[[FilesystemAPI, Path], None],
    base: Path | str | None,
    prefix: str,
    policy: NamingPolicy | None,
    fs: FilesystemAPI | None,
    diagnostics: CleanupDiagnostics | None,
    rng: random.Random | None,
) -> EntryT:
    naming = policy or get_default_policy()
    filesystem = fs if fs is not None else LocalFilesystem()
    generator = PathGenerator(resolve_base(base, naming), prefix, policy=naming, rng=rng)

    for candidate in islice(generator, naming.max_attempts):
        try:
            make(filesystem, candidate)
        except FileExistsError:
            logger.debug("Candidate %s already exists, retrying", candidate)
            continue
        except OSError as e:
            msg = f"Cannot create {entry_type.kind.value} {candidate}: {e}"
            raise FilesystemError(msg, candidate, e) from e

        logger.debug(
            "Created %s %s after %d attempt(s)",
            entry_type.kind.value,
            candidate,
            generator.attempts,
        )
        return entry_type(candidate, fs=filesystem, diagnostics=diagnostics)

    raise CollisionExhaustedError(generator.base, prefix, naming.max_attempts)


def create_directory(
    base: Path | str | None = None,
    prefix: str = "",
    *,
    policy: NamingPolicy | None = None,
    fs: FilesystemAPI | None = None,
    diagnostics: CleanupDiagnostics | None = None,
    rng: random.Random | None = None,
) -> ManagedDirectory:
    """Create a uniquely named directory owned by the returned handle.

    Example:
        >>> with create_directory("/tmp", "sess") as session:
        ...     session.join("out.txt").write_text("done")
        >>> # /tmp/sess.<suffix> is gone here

    Args:
        base: Existing directory to create in. Defaults to the policy's
            base_dir, then the scratch directory. Relative paths are made
            absolute against the current working directory.
        prefix: Cosmetic name prefix; may be empty.
        policy: Naming policy. Defaults to get_default_policy().
        fs: Filesystem collaborator. Defaults to LocalFilesystem.
        diagnostics: Channel for cleanup records. Defaults to get_diagnostics().
        rng: Random source for suffixes. Defaults to SystemRandom.

    Returns:
        Armed ManagedDirectory.

    Raises:
        ValueError: If prefix contains a path separator or NUL.
        CollisionExhaustedError: If every candidate within max_attempts existed.
        FilesystemError: If the filesystem rejected the creation.
    """
    return _create(
        ManagedDirectory,
        lambda filesystem, path: filesystem.create_dir(path),
        base,
        prefix,
        policy,
        fs,
        diagnostics,
        rng,
    )


def create_file(
    base: Path | str | None = None,
    prefix: str = "",
    *,
    policy: NamingPolicy | None = None,
    fs: FilesystemAPI | None = None,
    diagnostics: CleanupDiagnostics | None = None,
    rng: random.Random | None = None,
) -> ManagedFile:
    """Create a uniquely named empty file owned by the returned handle.

    Args:
        base: Existing directory to create in (see create_directory()).
        prefix: Cosmetic name prefix; may be empty.
        policy: Naming policy. Defaults to get_default_policy().
        fs: Filesystem collaborator. Defaults to LocalFilesystem.
        diagnostics: Channel for cleanup records. Defaults to get_diagnostics().
        rng: Random source for suffixes. Defaults to SystemRandom.

    Returns:
        Armed ManagedFile.

    Raises:
        ValueError: If prefix contains a path separator or NUL.
        CollisionExhaustedError: If every candidate within max_attempts existed.
        FilesystemError: If the filesystem rejected the creation.
    """
    return _create(
        ManagedFile,
        lambda filesystem, path: filesystem.create_file_exclusive(path),
        base,
        prefix,
        policy,
        fs,
        diagnostics,
        rng,
    )
