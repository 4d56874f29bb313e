"""Map a single 0-10 difficulty slider to per-dimension generation settings."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from tonalgen.errors import InvalidInput
from tonalgen.rhythm import MAX_RHYTHMIC_COMPLEXITY, MIN_RHYTHMIC_COMPLEXITY


class GenerationStyle(str, Enum):
    SATB = "SATB"
    MELODY_ACCOMPANIMENT = "MelodyAccompaniment"


#: Accompaniment voices used under a melody.
DEFAULT_ACCOMPANIMENT_VOICES = 3


@dataclass(frozen=True)
class GenerationSettings:
    generation_style: GenerationStyle
    rhythmic_complexity: int
    melodic_smoothness: int
    dissonance_strictness: float
    harmonic_complexity: int
    num_accompaniment_voices: int | None = None


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def map_difficulty_to_settings(difficulty: float, style: GenerationStyle | str) -> GenerationSettings:
    """
    Derive every generation dial from one difficulty value.

    Harder settings mean busier rhythms, richer harmony, larger melodic
    leaps and looser dissonance rules. Rhythmic complexity never drops below
    1, so it can go straight into the rhythm generator.

    Args:
        difficulty: 0-10; rounded, then clamped.
        style:      "SATB" or "MelodyAccompaniment".

    Raises:
        InvalidInput: If ``style`` is not a known GenerationStyle.
    """
    try:
        style = GenerationStyle(style)
    except ValueError:
        raise InvalidInput(f"Unknown generation style '{style}'.") from None
    level = min(10, max(0, _round_half_up(difficulty)))

    rhythmic = min(MAX_RHYTHMIC_COMPLEXITY, max(MIN_RHYTHMIC_COMPLEXITY, _round_half_up(level * 1.1)))
    return GenerationSettings(
        generation_style=style,
        rhythmic_complexity=rhythmic,
        melodic_smoothness=min(10, max(0, 10 - level)),
        dissonance_strictness=min(10.0, max(0.0, 10 - level * 0.8)),
        harmonic_complexity=min(10, _round_half_up(3 + level * 0.5)),
        num_accompaniment_voices=(
            DEFAULT_ACCOMPANIMENT_VOICES if style is GenerationStyle.MELODY_ACCOMPANIMENT else None
        ),
    )
