"""Unique candidate path generation.

A PathGenerator yields an endless, lazy stream of candidate paths inside a
base directory. Each candidate is ``<prefix><separator><suffix>`` where the
suffix is drawn at random for every candidate, so two generators never
produce correlated names. Creation code consumes candidates until one can
be created exclusively.
"""

import os
import random
from collections.abc import Iterator
from pathlib import Path

from ephemera.core.paths import absolute_base
from ephemera.core.policy import FORBIDDEN_NAME_CHARS, NamingPolicy, get_default_policy

# Backed by os.urandom: safe to share across threads, no mutable state
_SYSTEM_RANDOM = random.SystemRandom()


def random_suffix(length: int, alphabet: str, rng: random.Random | None = None) -> str:
    """Draw a random suffix with independently chosen characters.

    Args:
        length: Number of characters to draw.
        alphabet: Characters to choose from.
        rng: Random source. Defaults to the shared SystemRandom.

    Returns:
        Random string of the requested length.
    """
    source = rng or _SYSTEM_RANDOM
    return "".join(source.choices(alphabet, k=length))


def make_name(prefix: str, suffix: str, separator: str = ".") -> str:
    """Build a candidate file name from a prefix and a random suffix.

    An empty prefix yields the bare suffix, so the name is never empty.

    Args:
        prefix: Cosmetic, human-readable part of the name.
        suffix: Random part of the name.
        separator: Text placed between prefix and suffix.

    Returns:
        The combined file name.
    """
    if not prefix:
        return suffix
    return f"{prefix}{separator}{suffix}"


def validate_prefix(prefix: str) -> str:
    """Check that a prefix keeps candidates directly inside the base.

    Args:
        prefix: Cosmetic name prefix.

    Returns:
        The prefix unchanged.

    Raises:
        ValueError: If the prefix contains a path separator or NUL.
    """
    forbidden = FORBIDDEN_NAME_CHARS | {sep for sep in (os.sep, os.altsep) if sep}
    if forbidden & set(prefix):
        msg = f"prefix must not contain path separators or NUL: {prefix!r}"
        raise ValueError(msg)
    return prefix


class PathGenerator:
    """Lazy, restartable source of candidate paths in a base directory.

    Example:
        >>> generator = PathGenerator(Path("/tmp"), "sess")
        >>> candidate = next(iter(generator))
        >>> candidate.name.startswith("sess.")
        True

    Attributes:
        base: Absolute directory the candidates live in.
        prefix: Cosmetic name prefix.
        policy: Naming policy (suffix length, alphabet, separator).
        attempts: Number of candidates drawn so far, across all iterations.
    """

    def __init__(
        self,
        base: Path,
        prefix: str = "",
        policy: NamingPolicy | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the PathGenerator.

        Args:
            base: Directory for candidates. Relative paths are made absolute once.
            prefix: Cosmetic name prefix; may be empty or whitespace-only.
            policy: Naming policy. Defaults to get_default_policy().
            rng: Random source. Defaults to the shared SystemRandom.

        Raises:
            ValueError: If the prefix would place candidates outside base.
        """
        self.base = absolute_base(Path(base))
        self.prefix = validate_prefix(prefix)
        self.policy = policy or get_default_policy()
        self.attempts = 0
        self._rng = rng

    def candidate(self) -> Path:
        """Draw a single new candidate path."""
        suffix = random_suffix(self.policy.suffix_length, self.policy.alphabet, self._rng)
        self.attempts += 1
        return self.base / make_name(self.prefix, suffix, self.policy.separator)

    def __iter__(self) -> Iterator[Path]:
        while True:
            yield self.candidate()

    def __repr__(self) -> str:
        return f"PathGenerator(base={str(self.base)!r}, prefix={self.prefix!r})"


def generate(
    base: Path,
    prefix: str = "",
    *,
    policy: NamingPolicy | None = None,
    rng: random.Random | None = None,
) -> Iterator[Path]:
    """Yield an endless sequence of candidate paths.

    Args:
        base: Directory for candidates.
        prefix: Cosmetic name prefix.
        policy: Naming policy. Defaults to get_default_policy().
        rng: Random source. Defaults to the shared SystemRandom.

    Returns:
        Lazy iterator of candidate paths; bounded only by the consumer.
    """
    return iter(PathGenerator(base, prefix, policy=policy, rng=rng))
