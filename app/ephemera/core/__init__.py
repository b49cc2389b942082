"""Core lifecycle of managed entries.

This module provides unique path generation, creation of managed files
and directories, the managed entry handles themselves, the naming policy
configuration, and the exception hierarchy.
"""

from ephemera.core.create import create_directory, create_file
from ephemera.core.entry import EntryState, ManagedDirectory, ManagedEntry, ManagedFile
from ephemera.core.errors import (
    CleanupError,
    CollisionExhaustedError,
    EntryStateError,
    EphemeraError,
    FilesystemError,
)
from ephemera.core.naming import PathGenerator, generate
from ephemera.core.policy import NamingPolicy, load_policy, resolve_policy, save_policy

__all__ = [
    "CleanupError",
    "CollisionExhaustedError",
    "EntryState",
    "EntryStateError",
    "EphemeraError",
    "FilesystemError",
    "ManagedDirectory",
    "ManagedEntry",
    "ManagedFile",
    "NamingPolicy",
    "PathGenerator",
    "create_directory",
    "create_file",
    "generate",
    "load_policy",
    "resolve_policy",
    "save_policy",
]
