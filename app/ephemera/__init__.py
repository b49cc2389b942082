"""ephemera - self-cleaning temporary files and directories.

Create a uniquely named file or directory and let the returned handle
remove it when its ``with`` block ends, however the block is left::

    from ephemera import create_directory

    with create_directory(prefix="build") as workdir:
        workdir.join("out.txt").write_text("done")
"""

from ephemera.core import (
    CleanupError,
    CollisionExhaustedError,
    EntryState,
    EntryStateError,
    EphemeraError,
    FilesystemError,
    ManagedDirectory,
    ManagedEntry,
    ManagedFile,
    NamingPolicy,
    PathGenerator,
    create_directory,
    create_file,
    generate,
    load_policy,
    resolve_policy,
    save_policy,
)
from ephemera.filesystem import (
    CleanupDiagnostics,
    CleanupOutcome,
    CleanupRecord,
    EntryKind,
    FilesystemAPI,
    LocalFilesystem,
    get_diagnostics,
)

__version__ = "0.1.0"

__all__ = [
    "CleanupDiagnostics",
    "CleanupError",
    "CleanupOutcome",
    "CleanupRecord",
    "CollisionExhaustedError",
    "EntryKind",
    "EntryState",
    "EntryStateError",
    "EphemeraError",
    "FilesystemAPI",
    "FilesystemError",
    "LocalFilesystem",
    "ManagedDirectory",
    "ManagedEntry",
    "ManagedFile",
    "NamingPolicy",
    "PathGenerator",
    "__version__",
    "create_directory",
    "create_file",
    "generate",
    "get_diagnostics",
    "load_policy",
    "resolve_policy",
    "save_policy",
]
