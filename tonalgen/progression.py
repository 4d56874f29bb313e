"""Progression Generator: measure-by-measure Roman numerals with a forced cadence."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

import numpy as np

from tonalgen.keys import MAJOR, KeyDescriptor, resolve_key
from tonalgen.sampling import make_rng, uniform_choice

logger = logging.getLogger(__name__)

MIN_HARMONIC_COMPLEXITY: Final = 0
MAX_HARMONIC_COMPLEXITY: Final = 10

# Complexity thresholds at which the chord vocabulary grows.
SECONDARY_CHORDS_LEVEL: Final = 3
DOMINANT_SEVENTH_LEVEL: Final = 4
COLOR_CHORDS_LEVEL: Final = 6
LEADING_TONE_SEVENTH_LEVEL: Final = 8


@dataclass(frozen=True)
class FunctionalNumerals:
    """The Roman numerals filling each harmonic function in one mode."""

    tonic: str
    subdominant: str
    supertonic: str
    mediant: str
    submediant: str
    dominant: str = "V"
    dominant_seventh: str = "V7"
    leading_tone: str = "vii°"
    leading_tone_seventh: str = "vii°7"

    @classmethod
    def for_mode(cls, mode: str) -> FunctionalNumerals:
        if mode == MAJOR:
            return cls(tonic="I", subdominant="IV", supertonic="ii", mediant="iii", submediant="vi")
        return cls(tonic="i", subdominant="iv", supertonic="ii°", mediant="III", submediant="VI")

    @property
    def dominant_family(self) -> frozenset[str]:
        return frozenset({self.dominant, self.dominant_seventh, self.leading_tone, self.leading_tone_seventh})

    @property
    def subdominant_family(self) -> frozenset[str]:
        return frozenset({self.subdominant, self.supertonic})

    @property
    def tonic_substitutes(self) -> frozenset[str]:
        return frozenset({self.submediant})

    @property
    def cadential_chords(self) -> tuple[str, ...]:
        """Penultimate-measure candidates, best first."""
        return (self.dominant_seventh, self.dominant, self.subdominant)


def clamp_complexity(complexity: int) -> int:
    return max(MIN_HARMONIC_COMPLEXITY, min(MAX_HARMONIC_COMPLEXITY, int(complexity)))


def allowed_chords(numerals: FunctionalNumerals, complexity: int) -> list[str]:
    """Chord vocabulary available at a harmonic complexity, in a stable order."""
    chords = [numerals.tonic, numerals.subdominant, numerals.dominant]
    if complexity >= SECONDARY_CHORDS_LEVEL:
        chords += [numerals.submediant, numerals.supertonic]
    if complexity >= COLOR_CHORDS_LEVEL:
        chords += [numerals.mediant, numerals.leading_tone]
    if complexity >= DOMINANT_SEVENTH_LEVEL:
        chords = [numerals.dominant_seventh if c == numerals.dominant else c for c in chords]
    if complexity >= LEADING_TONE_SEVENTH_LEVEL:
        chords = [numerals.leading_tone_seventh if c == numerals.leading_tone else c for c in chords]
    return list(dict.fromkeys(chords))


def preferred_targets(numerals: FunctionalNumerals, previous: str, allowed: list[str]) -> set[str]:
    """Chords a functional category tends to move to."""
    if previous in numerals.dominant_family:
        return {numerals.tonic, numerals.submediant}
    if previous in numerals.subdominant_family:
        return {numerals.dominant, numerals.dominant_seventh, numerals.tonic, numerals.submediant}
    if previous in numerals.tonic_substitutes:
        return {numerals.subdominant, numerals.supertonic, numerals.dominant, numerals.dominant_seventh}
    return {c for c in allowed if c != numerals.tonic}


class ProgressionGenerator:
    """
    Weighted random walk over functional harmony with a forced cadence.

    Args:
        rng:                       numpy Generator or seed; a fresh one when None.
        base_target_probability:   Chance of honoring the preferred targets at complexity 0.
        target_probability_step:   Added to that chance per complexity point.
        non_target_probability:    Chance of deliberately leaving the targets
                                   when they were not honored.
    """

    def __init__(
        self,
        rng: np.random.Generator | int | None = None,
        base_target_probability: float = 0.6,
        target_probability_step: float = 0.03,
        non_target_probability: float = 0.3,
    ) -> None:
        self.rng = make_rng(rng)
        self.base_target_probability = base_target_probability
        self.target_probability_step = target_probability_step
        self.non_target_probability = non_target_probability

    def target_probability(self, complexity: int) -> float:
        return min(1.0, self.base_target_probability + self.target_probability_step * complexity)

    def _next_chord(self, numerals: FunctionalNumerals, previous: str, allowed: list[str], complexity: int) -> str:
        candidates = [c for c in allowed if c != previous] if len(allowed) > 1 else list(allowed)
        targets = preferred_targets(numerals, previous, allowed)
        targeted = [c for c in candidates if c in targets]

        pool = candidates
        if targeted:
            if self.rng.random() < self.target_probability(complexity):
                pool = targeted
            else:
                others = [c for c in candidates if c not in targets]
                if others and self.rng.random() < self.non_target_probability:
                    pool = others
        return uniform_choice(pool, self.rng)

    def generate(self, key: str | KeyDescriptor, measures: int, complexity: int) -> list[str]:
        """
        Generate one Roman numeral per measure.

        Args:
            key:        Key name (e.g. "C", "Gm") or a resolved KeyDescriptor.
            measures:   Number of measures; non-positive yields an empty list.
            complexity: Harmonic complexity 0-10, clamped.

        Raises:
            InvalidKey: If ``key`` cannot be resolved.
        """
        if measures <= 0:
            return []

        descriptor = key if isinstance(key, KeyDescriptor) else resolve_key(key)
        level = clamp_complexity(complexity)
        numerals = FunctionalNumerals.for_mode(descriptor.mode)
        allowed = allowed_chords(numerals, level)

        progression = [numerals.tonic]
        for _ in range(1, measures - 2):
            progression.append(self._next_chord(numerals, progression[-1], allowed, level))

        if measures >= 3:
            cadence = next((c for c in numerals.cadential_chords if c in allowed), numerals.tonic)
            progression.append(cadence)
        if measures >= 2:
            progression.append(numerals.tonic)

        logger.debug(
            "Generated progression (%s, complexity %d): %s",
            descriptor.name,
            level,
            " | ".join(progression),
        )
        return progression


def generate_progression(
    key: str,
    measures: int,
    complexity: int,
    rng: np.random.Generator | int | None = None,
) -> list[str]:
    """Convenience wrapper around ``ProgressionGenerator(rng).generate``."""
    return ProgressionGenerator(rng=rng).generate(key, measures, complexity)
