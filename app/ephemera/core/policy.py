"""Naming policy configuration.

This module provides the configuration model and I/O functions for how
managed entries are named: suffix length and alphabet, the separator
between prefix and suffix, the retry ceiling on name collisions, and an
optional default base directory.

Creation only ever uses the NamingPolicy passed in by the caller (or the
defaults). The TOML file at ~/.config/ephemera/policy.toml is opt-in: it is
read or written only through load_policy(), resolve_policy() and save_policy().
"""

import logging
import os
import string
import tomllib
from pathlib import Path
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ephemera.core.paths import get_policy_path

logger = logging.getLogger(__name__)

DEFAULT_ALPHABET = string.ascii_letters + string.digits
DEFAULT_SUFFIX_LENGTH = 12
DEFAULT_MAX_ATTEMPTS = 10_000

FORBIDDEN_NAME_CHARS = frozenset({"/", "\\", "\0"})


class NamingPolicy(BaseModel):
    """Policy for generating unique entry names.

    With the defaults a suffix carries 62**12 (about 2**71) possibilities,
    so accidental collisions are negligible and the retry ceiling is only
    a sanity bound against a misbehaving environment.

    Attributes:
        suffix_length: Number of random characters per candidate name.
        alphabet: Characters the random suffix is drawn from.
        separator: Text placed between a non-empty prefix and the suffix.
        max_attempts: Candidates tried before giving up on collisions.
        base_dir: Default directory for new entries (None = scratch dir).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    suffix_length: Annotated[
        int,
        Field(ge=6, le=64, description="Random suffix length (6-64)"),
    ] = DEFAULT_SUFFIX_LENGTH
    alphabet: Annotated[
        str,
        Field(description="Characters used for the random suffix"),
    ] = DEFAULT_ALPHABET
    separator: Annotated[
        str,
        Field(max_length=8, description="Separator between prefix and suffix"),
    ] = "."
    max_attempts: Annotated[
        int,
        Field(ge=1, le=1_000_000, description="Collision retry ceiling"),
    ] = DEFAULT_MAX_ATTEMPTS
    base_dir: Annotated[
        Path | None,
        Field(description="Default base directory (None = scratch dir)"),
    ] = None

    @field_validator("alphabet")
    @classmethod
    def validate_alphabet(cls, value: str) -> str:
        if len(set(value)) < 16:
            msg = "alphabet must contain at least 16 distinct characters"
            raise ValueError(msg)
        if FORBIDDEN_NAME_CHARS & set(value):
            msg = "alphabet must not contain path separators or NUL"
            raise ValueError(msg)
        # Duplicates would bias the draw
        return "".join(dict.fromkeys(value))

    @field_validator("separator")
    @classmethod
    def validate_separator(cls, value: str) -> str:
        if FORBIDDEN_NAME_CHARS & set(value):
            msg = "separator must not contain path separators or NUL"
            raise ValueError(msg)
        return value


class PolicyError(Exception):
    """Base exception for naming policy errors."""


class PolicyNotFoundError(PolicyError):
    """Raised when the policy file is not found."""


class PolicyParseError(PolicyError):
    """Raised when the policy file cannot be parsed."""


def get_default_policy() -> NamingPolicy:
    """Create a default NamingPolicy.

    Returns:
        NamingPolicy with default settings.
    """
    return NamingPolicy()


def load_policy(path: Path | None = None) -> NamingPolicy:
    """Load the naming policy from a TOML file.

    Args:
        path: Path to the policy file. If None, uses the default policy path.

    Returns:
        Validated NamingPolicy object.

    Raises:
        PolicyNotFoundError: If the policy file doesn't exist.
        PolicyParseError: If the TOML syntax is invalid.
        PolicyError: If the content doesn't match the schema.
    """
    policy_path = path or get_policy_path()

    if not policy_path.exists():
        raise PolicyNotFoundError(f"Naming policy not found: {policy_path}")

    try:
        with open(policy_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise PolicyParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise PolicyError(f"Failed to read naming policy: {e}") from e

    try:
        policy = NamingPolicy.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise PolicyError(f"Invalid naming policy content: {e}") from e

    logger.info("Loaded naming policy from %s", policy_path)
    return policy


def resolve_policy(path: Path | None = None) -> NamingPolicy:
    """Load the naming policy, falling back to defaults if no file exists.

    Args:
        path: Path to the policy file. If None, uses the default policy path.

    Returns:
        The configured NamingPolicy, or the default one.

    Raises:
        PolicyParseError: If the file exists but has invalid TOML syntax.
        PolicyError: If the file exists but its content is invalid.
    """
    try:
        return load_policy(path)
    except PolicyNotFoundError:
        return get_default_policy()


def save_policy(policy: NamingPolicy, path: Path | None = None) -> Path:
    """Save the naming policy to a TOML file.

    The file is written atomically: the TOML is written to a managed
    temporary file next to the target, which is then renamed into place
    with os.replace(). If anything fails the temporary file is removed.

    Args:
        policy: The NamingPolicy object to save.
        path: Path to save the policy. If None, uses the default policy path.

    Returns:
        Path where the policy was saved.

    Raises:
        PolicyError: If the file cannot be written.
    """
    from ephemera.core.create import create_file
    from ephemera.core.errors import EphemeraError

    policy_path = path or get_policy_path()
    data = _policy_to_dict(policy)

    try:
        policy_path.parent.mkdir(parents=True, exist_ok=True)
        with create_file(policy_path.parent, f".{policy_path.name}") as tmp:
            with tmp.open("wb") as f:
                tomli_w.dump(data, f)
            # os.replace() is atomic on POSIX
            os.replace(tmp.path, policy_path)
            tmp.release()
    except (OSError, EphemeraError) as e:
        raise PolicyError(f"Failed to write naming policy: {e}") from e

    logger.info("Saved naming policy to %s", policy_path)
    return policy_path


def _policy_to_dict(policy: NamingPolicy) -> dict[str, object]:
    """Convert NamingPolicy to a dictionary for TOML serialization.

    Only includes values that differ from the defaults to keep the file clean.

    Args:
        policy: The NamingPolicy to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    defaults = get_default_policy()
    result: dict[str, object] = {}

    if policy.suffix_length != defaults.suffix_length:
        result["suffix_length"] = policy.suffix_length
    if policy.alphabet != defaults.alphabet:
        result["alphabet"] = policy.alphabet
    if policy.separator != defaults.separator:
        result["separator"] = policy.separator
    if policy.max_attempts != defaults.max_attempts:
        result["max_attempts"] = policy.max_attempts
    if policy.base_dir is not None:
        result["base_dir"] = str(policy.base_dir)

    return result
