"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import random
import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest
from ephemera.core.naming import PathGenerator
from ephemera.core.policy import NamingPolicy
from ephemera.filesystem.diagnostics import CleanupDiagnostics


@pytest.fixture
def diagnostics() -> CleanupDiagnostics:
    """Fresh diagnostics channel, isolated from the process-wide one."""
    return CleanupDiagnostics()


@pytest.fixture
def scratch_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Scratch directory used when no explicit base is given."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return scratch


@pytest.fixture
def small_policy() -> NamingPolicy:
    """Policy with a short retry budget for collision tests."""
    return NamingPolicy(max_attempts=5)


@pytest.fixture
def predicted_candidates() -> Callable[[Path, str, int, int], list[Path]]:
    """Return the first N candidates a seeded generator will produce."""

    def _predict(base: Path, prefix: str, seed: int, count: int) -> list[Path]:
        generator = PathGenerator(base, prefix, rng=random.Random(seed))
        return [generator.candidate() for _ in range(count)]

    return _predict
