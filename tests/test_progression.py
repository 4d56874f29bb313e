"""Unit tests for the progression generator."""

import numpy as np
import pytest

from tonalgen.errors import InvalidInput
from tonalgen.keys import MAJOR, MINOR
from tonalgen.progression import (
    FunctionalNumerals,
    ProgressionGenerator,
    allowed_chords,
    generate_progression,
    preferred_targets,
)


def _rng(seed: int = 1234) -> np.random.Generator:
    return np.random.default_rng(seed)


@pytest.mark.parametrize("measures", [0, -1, -10])
def test_non_positive_measures_returns_empty(measures: int) -> None:
    assert generate_progression("C", measures, 5, rng=_rng()) == []


def test_short_progressions_are_tonic_only() -> None:
    assert generate_progression("C", 1, 5, rng=_rng()) == ["I"]
    assert generate_progression("C", 2, 5, rng=_rng()) == ["I", "I"]
    assert generate_progression("Am", 2, 5, rng=_rng()) == ["i", "i"]


@pytest.mark.parametrize("key", ["C", "Eb", "Am", "F#m"])
@pytest.mark.parametrize("complexity", [0, 3, 4, 6, 8, 10])
def test_progression_shape(key: str, complexity: int) -> None:
    rng = _rng(complexity)
    for measures in range(1, 13):
        progression = generate_progression(key, measures, complexity, rng=rng)
        numerals = FunctionalNumerals.for_mode(MINOR if key.endswith("m") else MAJOR)
        allowed = allowed_chords(numerals, complexity) + [numerals.tonic]

        assert len(progression) == measures
        assert progression[0] == numerals.tonic
        assert progression[-1] == numerals.tonic
        assert set(progression) <= set(allowed)
        if measures >= 3:
            assert progression[-2] in {"V", "V7", numerals.subdominant, numerals.tonic}
            assert progression[-2] == ("V7" if complexity >= 4 else "V")


def test_random_walk_avoids_immediate_repeats() -> None:
    progression = generate_progression("C", 40, 10, rng=_rng(7))
    walk = progression[:-2]
    assert all(a != b for a, b in zip(walk, walk[1:]))


def test_seeded_generation_is_deterministic() -> None:
    first = ProgressionGenerator(rng=42).generate("G", 16, 7)
    second = ProgressionGenerator(rng=42).generate("G", 16, 7)
    assert first == second


def test_complexity_is_clamped() -> None:
    progression = ProgressionGenerator(rng=3).generate("C", 6, 99)
    assert progression[-2] == "V7"
    assert ProgressionGenerator(rng=3).generate("C", 3, -5) == ["I", "V", "I"]


def test_invalid_key_raises_invalid_input() -> None:
    with pytest.raises(InvalidInput):
        generate_progression("H", 4, 3, rng=_rng())


def test_allowed_chords_grow_with_complexity() -> None:
    major = FunctionalNumerals.for_mode(MAJOR)
    assert allowed_chords(major, 0) == ["I", "IV", "V"]
    assert allowed_chords(major, 3) == ["I", "IV", "V", "vi", "ii"]
    assert allowed_chords(major, 4) == ["I", "IV", "V7", "vi", "ii"]
    assert allowed_chords(major, 6) == ["I", "IV", "V7", "vi", "ii", "iii", "vii°"]
    assert allowed_chords(major, 10) == ["I", "IV", "V7", "vi", "ii", "iii", "vii°7"]

    minor = FunctionalNumerals.for_mode(MINOR)
    assert allowed_chords(minor, 6) == ["i", "iv", "V7", "VI", "ii°", "III", "vii°"]


def test_preferred_targets_follow_function() -> None:
    major = FunctionalNumerals.for_mode(MAJOR)
    allowed = allowed_chords(major, 10)
    assert preferred_targets(major, "V7", allowed) == {"I", "vi"}
    assert preferred_targets(major, "ii", allowed) == {"V", "V7", "I", "vi"}
    assert preferred_targets(major, "vi", allowed) == {"IV", "ii", "V", "V7"}
    assert preferred_targets(major, "I", allowed) == set(allowed) - {"I"}


def test_always_honoring_targets_after_dominant() -> None:
    generator = ProgressionGenerator(rng=5, base_target_probability=1.0, target_probability_step=0.0)
    progression = generator.generate("C", 30, 10)
    walk = progression[:-2]
    for previous, current in zip(walk, walk[1:]):
        if previous in {"V7", "vii°7"}:
            assert current in {"I", "vi"}
