"""Filesystem access and cleanup bookkeeping.

This module provides the filesystem primitives managed entries use,
the models describing entry kinds and cleanup outcomes, and the
diagnostics channel where cleanup failures are recorded.
"""

from ephemera.filesystem.api import FilesystemAPI, LocalFilesystem
from ephemera.filesystem.diagnostics import CleanupDiagnostics, get_diagnostics
from ephemera.filesystem.models import CleanupOutcome, CleanupRecord, EntryKind

__all__ = [
    "CleanupDiagnostics",
    "CleanupOutcome",
    "CleanupRecord",
    "EntryKind",
    "FilesystemAPI",
    "LocalFilesystem",
    "get_diagnostics",
]
