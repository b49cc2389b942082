"""Unit tests for path management."""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
from ephemera.core.paths import (
    APP_NAME,
    absolute_base,
    get_config_dir,
    get_policy_path,
    get_scratch_dir,
)


class TestGetConfigDir:
    """Tests for get_config_dir function."""

    def test_default_config_dir(self) -> None:
        """get_config_dir returns default path when XDG_CONFIG_HOME not set."""
        with patch.dict(os.environ, {}, clear=True):
            os.environ.pop("XDG_CONFIG_HOME", None)

            result = get_config_dir()

        assert result == Path.home() / ".config" / APP_NAME

    def test_respects_xdg_config_home(self, tmp_path: Path) -> None:
        """get_config_dir respects XDG_CONFIG_HOME environment variable."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            result = get_config_dir()

        assert result == tmp_path / APP_NAME

    def test_policy_path(self, tmp_path: Path) -> None:
        """get_policy_path points at policy.toml in the config dir."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            result = get_policy_path()

        assert result == tmp_path / APP_NAME / "policy.toml"


class TestGetScratchDir:
    """Tests for get_scratch_dir function."""

    def test_defaults_to_system_temp(self) -> None:
        """The system temporary directory is used."""
        assert get_scratch_dir() == Path(tempfile.gettempdir())

    def test_follows_tempfile(self, scratch_dir: Path) -> None:
        """Whatever tempfile reports as the temp dir is the scratch dir."""
        assert get_scratch_dir() == scratch_dir

    def test_no_environment_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """No package-specific environment variable redirects scratch objects."""
        monkeypatch.setenv("EPHEMERA_SCRATCH_DIR", str(tmp_path))

        assert get_scratch_dir() == Path(tempfile.gettempdir())


class TestAbsoluteBase:
    """Tests for absolute_base function."""

    def test_absolute_unchanged(self, tmp_path: Path) -> None:
        """Absolute paths are returned as is."""
        assert absolute_base(tmp_path) == tmp_path

    def test_relative_joined_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Relative paths are joined onto the working directory."""
        monkeypatch.chdir(tmp_path)

        assert absolute_base(Path("sub")) == Path.cwd() / "sub"
