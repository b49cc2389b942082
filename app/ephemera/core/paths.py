"""Path management for ephemera.

Scratch objects default to the process's temporary directory as reported by
tempfile. The optional naming policy file follows the XDG Base Directory
Specification and is only read when the caller asks for it.

Defaults:
- Scratch: tempfile.gettempdir()
- Config: ~/.config/ephemera/
"""

import os
import tempfile
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "ephemera"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/ephemera/ (or XDG_CONFIG_HOME/ephemera/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_policy_path() -> Path:
    """Get the default naming policy file path.

    Returns:
        Path to ~/.config/ephemera/policy.toml.
    """
    return get_config_dir() / "policy.toml"


def get_scratch_dir() -> Path:
    """Get the default base directory for new managed entries.

    Unlike the config directory, this is not namespaced by APP_NAME: entries
    are created directly in the scratch directory.

    Returns:
        The system temporary directory.
    """
    return Path(tempfile.gettempdir())


def absolute_base(base: Path) -> Path:
    """Make a base directory absolute without resolving symlinks.

    Args:
        base: Absolute or relative directory path.

    Returns:
        base unchanged if absolute, otherwise joined onto the working directory.
    """
    if base.is_absolute():
        return base
    return Path.cwd() / base
