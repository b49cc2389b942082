"""Unit tests for candidate path generation."""

import random
import threading
from pathlib import Path
from unittest.mock import patch

import pytest
from ephemera.core.naming import (
    PathGenerator,
    generate,
    make_name,
    random_suffix,
    validate_prefix,
)
from ephemera.core.policy import DEFAULT_ALPHABET, NamingPolicy


class TestMakeName:
    """Tests for make_name function."""

    def test_prefix_and_suffix_joined_with_separator(self) -> None:
        """A non-empty prefix is joined to the suffix with the separator."""
        assert make_name("sess", "abc123") == "sess.abc123"

    def test_custom_separator(self) -> None:
        """A custom separator replaces the default dot."""
        assert make_name("sess", "abc123", "-") == "sess-abc123"

    def test_empty_prefix_yields_bare_suffix(self) -> None:
        """An empty prefix produces just the suffix, never an empty name."""
        assert make_name("", "abc123") == "abc123"

    def test_whitespace_prefix_is_kept(self) -> None:
        """A whitespace-only prefix is accepted as is."""
        assert make_name("  ", "abc123") == "  .abc123"


class TestValidatePrefix:
    """Tests for validate_prefix function."""

    def test_plain_prefix_accepted(self) -> None:
        """Ordinary prefixes, dots included, pass unchanged."""
        assert validate_prefix("sess") == "sess"
        assert validate_prefix("..") == ".."
        assert validate_prefix("") == ""

    @pytest.mark.parametrize("prefix", ["../esc", "a/b", "/abs/x", "back\\slash", "nul\x00"])
    def test_path_syntax_rejected(self, prefix: str) -> None:
        """Separators and NUL are refused."""
        with pytest.raises(ValueError, match="path separators or NUL"):
            validate_prefix(prefix)


class TestRandomSuffix:
    """Tests for random_suffix function."""

    def test_length_and_alphabet(self) -> None:
        """Suffix has the requested length and only alphabet characters."""
        suffix = random_suffix(12, DEFAULT_ALPHABET)

        assert len(suffix) == 12
        assert set(suffix) <= set(DEFAULT_ALPHABET)

    def test_seeded_rng_is_deterministic(self) -> None:
        """Two RNGs with the same seed draw the same suffix."""
        first = random_suffix(8, DEFAULT_ALPHABET, random.Random(7))
        second = random_suffix(8, DEFAULT_ALPHABET, random.Random(7))

        assert first == second


class TestPathGenerator:
    """Tests for PathGenerator class."""

    def test_candidates_live_in_base(self, tmp_path: Path) -> None:
        """Every candidate is a direct child of the base directory."""
        generator = PathGenerator(tmp_path, "foo")

        for _, path in zip(range(50), generator):
            assert path.parent == tmp_path
            assert path.name.startswith("foo.")

    def test_dot_prefix_stays_in_base(self, tmp_path: Path) -> None:
        """A prefix made of dots still names a direct child of base."""
        candidate = PathGenerator(tmp_path, "..").candidate()

        assert candidate.parent == tmp_path
        assert candidate.name.startswith("...")

    def test_prefix_with_separator_rejected(self, tmp_path: Path) -> None:
        """A prefix that would escape base is refused before any draw."""
        with pytest.raises(ValueError, match="path separators"):
            PathGenerator(tmp_path, str(tmp_path.parent / "x"))

        with pytest.raises(ValueError, match="path separators"):
            generate(tmp_path, "../esc")

    def test_suffix_matches_policy(self, tmp_path: Path) -> None:
        """The random part follows the policy's length and alphabet."""
        policy = NamingPolicy(suffix_length=20, alphabet="0123456789abcdef")
        generator = PathGenerator(tmp_path, "hex", policy=policy)

        name = generator.candidate().name
        suffix = name.removeprefix("hex.")

        assert len(suffix) == 20
        assert set(suffix) <= set("0123456789abcdef")

    def test_uniqueness_over_many_draws(self, tmp_path: Path) -> None:
        """10,000 draws with the same base and prefix are all distinct."""
        generator = PathGenerator(tmp_path, "foo")

        candidates = [generator.candidate() for _ in range(10_000)]

        assert len(set(candidates)) == 10_000

    def test_attempts_counted(self, tmp_path: Path) -> None:
        """attempts counts every candidate drawn."""
        generator = PathGenerator(tmp_path, "foo")
        iterator = iter(generator)
        next(iterator)
        next(iterator)
        generator.candidate()

        assert generator.attempts == 3

    def test_restartable(self, tmp_path: Path) -> None:
        """Each iteration starts a fresh lazy sequence."""
        generator = PathGenerator(tmp_path, "foo")

        first = next(iter(generator))
        second = next(iter(generator))

        assert first != second
        assert first.parent == second.parent == tmp_path

    def test_relative_base_made_absolute(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A relative base is resolved against the working directory once."""
        monkeypatch.chdir(tmp_path)

        generator = PathGenerator(Path("work"), "foo")

        assert generator.base == Path.cwd() / "work"
        assert generator.base.is_absolute()
        assert generator.candidate().parent == generator.base

    def test_empty_prefix(self, tmp_path: Path) -> None:
        """Candidates for an empty prefix are the bare suffix."""
        generator = PathGenerator(tmp_path, "")

        name = generator.candidate().name

        assert len(name) == 12
        assert "." not in name

    def test_independent_generators_do_not_correlate(self, tmp_path: Path) -> None:
        """Two default generators draw different sequences."""
        first = [c for _, c in zip(range(20), PathGenerator(tmp_path, "x"))]
        second = [c for _, c in zip(range(20), PathGenerator(tmp_path, "x"))]

        assert not set(first) & set(second)

    def test_concurrent_draws_stay_unique(self, tmp_path: Path) -> None:
        """Threads drawing from the shared random source never collide."""
        results: list[list[Path]] = []
        lock = threading.Lock()

        def _draw() -> None:
            generator = PathGenerator(tmp_path, "t")
            batch = [generator.candidate() for _ in range(1000)]
            with lock:
                results.append(batch)

        threads = [threading.Thread(target=_draw) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        flat = [path for batch in results for path in batch]
        assert len(flat) == 8000
        assert len(set(flat)) == 8000

    def test_uses_system_random_by_default(self, tmp_path: Path) -> None:
        """Without an injected rng the shared SystemRandom is used."""
        with patch(
            "ephemera.core.naming._SYSTEM_RANDOM.choices", return_value=list("a" * 12)
        ) as mock_choices:
            candidate = PathGenerator(tmp_path, "foo").candidate()

        assert candidate.name == "foo.aaaaaaaaaaaa"
        mock_choices.assert_called_once()

    def test_repr(self, tmp_path: Path) -> None:
        """repr shows base and prefix."""
        assert "prefix='foo'" in repr(PathGenerator(tmp_path, "foo"))


class TestGenerate:
    """Tests for generate function."""

    def test_generate_is_lazy_and_endless(self, tmp_path: Path) -> None:
        """generate yields as many candidates as the consumer pulls."""
        iterator = generate(tmp_path, "foo")

        candidates = [next(iterator) for _ in range(100)]

        assert len(set(candidates)) == 100

    def test_generate_with_seeded_rng(self, tmp_path: Path) -> None:
        """generate honours an injected random source."""
        first = next(generate(tmp_path, "foo", rng=random.Random(3)))
        second = next(generate(tmp_path, "foo", rng=random.Random(3)))

        assert first == second
