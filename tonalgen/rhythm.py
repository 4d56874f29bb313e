"""
Rhythm Generator: fills one measure with note and rest durations.

Events are signed denominators: ``4`` is a quarter note, ``-8`` an eighth
rest. A measure is valid only when the reciprocals of its events sum to the
meter's measure length exactly.

Two regimes:

* **Low complexity (1-4), simple meters** - a weighted fill with whole,
  half and quarter notes (eighths from complexity 3). Notes that start off
  the beat must end by the next beat, so nothing needs a tie. No rests.

* **Cells** - everything else, additive meters at every complexity included.
  The measure is cut into beat groups and each group gets one pre-built
  rhythmic cell from a complexity tier, so no event crosses a group boundary.
"""

from __future__ import annotations

import logging
import math
from fractions import Fraction
from numbers import Integral
from typing import Final

import numpy as np

from tonalgen.errors import GenerationError, InvalidInput
from tonalgen.meter import Meter, MeterKind, validate_meter
from tonalgen.sampling import make_rng, weighted_choice

logger = logging.getLogger(__name__)

MIN_RHYTHMIC_COMPLEXITY: Final = 1
MAX_RHYTHMIC_COMPLEXITY: Final = 10
LOW_COMPLEXITY_LIMIT: Final = 4

Cell = tuple[int, ...]

# ── Low-complexity weight tables ────────────────────────────────────────────

#: Denominator -> weight for each low complexity level.
LOW_COMPLEXITY_WEIGHTS: Final[dict[int, dict[int, float]]] = {
    1: {1: 4, 2: 6, 4: 3},
    2: {1: 1, 2: 5, 4: 8},
    3: {2: 4, 4: 10, 8: 3},
    4: {1: 1, 2: 3, 4: 10, 8: 6},
}

# ── Cell library ────────────────────────────────────────────────────────────

#: Group duration -> tier (1-5) -> cells whose durations sum to the group.
RHYTHMIC_CELLS: Final[dict[Fraction, dict[int, tuple[Cell, ...]]]] = {
    # One quarter-note beat.
    Fraction(1, 4): {
        1: ((4,), (8, 8), (8, 16, 16), (16, 16, 8), (16, 8, 16)),
        2: ((4,), (8, 8), (-8, 8), (8, 16, 16), (16, 16, 8), (16, 8, 16)),
        3: ((8, 8), (-8, 16, 16), (16, 16, 16, 16), (8, 16, 16), (16, 16, 8), (16, 8, 16)),
        4: ((8, 8), (-8, 8), (16, 16, 16, 16), (8, 16, 16), (-4,), (16, 16, 8), (16, 8, 16)),
        5: ((16, 16, 16, 16), (8, 16, 16), (16, 16, 8), (-8, 16, 16), (16, 8, 16)),
    },
    # One dotted-quarter beat of a compound meter.
    Fraction(3, 8): {
        1: ((8, 8, 8), (4, 8)),
        2: ((8, 8, 8), (4, 8), (-8, 8, 8)),
        3: ((8, 8, 8), (8, 16, 16, 16, 16), (16, 16, 16, 16, 8), (4, 8), (-4, 8)),
        4: ((16, 16, 16, 16, 16, 16), (8, 16, 16, 16, 16), (16, 16, 8, 16, 16), (-8, 8, 8)),
        5: ((16, 16, 16, 16, 16, 16), (8, 16, 16, 16, 16), (16, 16, 16, 16, 8), (16, 16, 8, 16, 16)),
    },
    # One half-note beat of cut time.
    Fraction(1, 2): {
        1: ((2,), (4, 4)),
        2: ((2,), (4, 4), (-4, 4)),
        3: ((4, 4), (4, 8, 8), (8, 8, 4), (-4, 4)),
        4: ((4, 8, 8), (8, 8, 4), (8, 8, 8, 8), (-4, 8, 8), (8, 4, 8)),
        5: ((8, 8, 8, 8), (4, 16, 16, 16, 16), (16, 16, 16, 16, 4), (-8, 8, 4), (8, 4, 8)),
    },
}

#: Meter -> beat-group sizes in units of the meter's denominator.
GROUPING_PLANS: Final[dict[tuple[int, int], tuple[int, ...]]] = {
    (3, 8): (3,),
    (6, 8): (3, 3),
    (9, 8): (3, 3, 3),
    (12, 8): (3, 3, 3, 3),
    (5, 8): (3, 2),
    (7, 8): (2, 2, 3),
    (5, 4): (3, 2),
    (7, 4): (3, 2, 2),
}

STRONG_BEAT_REST_FACTOR: Final = 0.1
LOW_COMPLEXITY_REST_FACTOR: Final = 0.5
SIXTEENTH_RUN_DAMPING: Final = 0.4
SIXTEENTH_RUN_BOOST: Final = 1.5
SIXTEENTH_RUN_MIN: Final = 2


def event_length(event: int) -> Fraction:
    """Duration of a signed denominator event as a fraction of a whole note."""
    return Fraction(1, abs(event))


def total_length(events: list[int] | tuple[int, ...]) -> Fraction:
    return sum((event_length(e) for e in events), Fraction(0))


def grouping_plan(meter: Meter) -> tuple[int, ...]:
    """Beat-group sizes for a meter; simple meters get one group per beat."""
    return GROUPING_PLANS.get((meter.beats, meter.unit), (1,) * meter.beats)


def cell_weight(cell: Cell, group_index: int, meter: Meter, complexity: int, after_sixteenth_run: bool) -> float:
    """Selection weight of a cell at a position in the measure."""
    weight = 1.0
    starts_with_rest = cell[0] < 0
    is_strong_beat = group_index == 0 or (meter.beats == 4 and group_index == 2)
    if starts_with_rest and is_strong_beat:
        weight = STRONG_BEAT_REST_FACTOR
    if starts_with_rest and complexity <= LOW_COMPLEXITY_LIMIT:
        weight *= LOW_COMPLEXITY_REST_FACTOR
    if after_sixteenth_run and _is_sixteenth_run(cell):
        if complexity >= 8:
            weight *= SIXTEENTH_RUN_BOOST
        elif complexity > LOW_COMPLEXITY_LIMIT:
            weight *= SIXTEENTH_RUN_DAMPING
    return weight


def _is_sixteenth_run(cell: Cell) -> bool:
    return sum(1 for e in cell if abs(e) == 16) >= SIXTEENTH_RUN_MIN


def _validate_complexity(complexity: int) -> int:
    if isinstance(complexity, bool) or not isinstance(complexity, Integral):
        raise InvalidInput(f"Complexity must be integer 1-10. Got {complexity!r}")
    if not MIN_RHYTHMIC_COMPLEXITY <= complexity <= MAX_RHYTHMIC_COMPLEXITY:
        raise InvalidInput(f"Complexity must be integer 1-10. Got {complexity}")
    return int(complexity)


def _check_sum(events: list[int], meter: Meter) -> list[int]:
    actual = total_length(events)
    if actual != meter.measure_length:
        raise GenerationError(
            f"Internal rhythm generation mismatch for {meter}: expected {meter.measure_length} got {actual}."
        )
    return events


class RhythmGenerator:
    """Generates one measure of rhythm at a time; ``rng`` may be a Generator or a seed."""

    def __init__(self, rng: np.random.Generator | int | None = None) -> None:
        self.rng = make_rng(rng)

    def generate(self, meter: str | Meter, complexity: int) -> list[int]:
        """
        Generate the events of one measure.

        Args:
            meter:      A meter string like "6/8" or a validated Meter.
            complexity: Integer 1-10.

        Returns:
            Signed denominators whose lengths sum exactly to one measure.

        Raises:
            InvalidInput: On a bad meter or complexity (InvalidMeter for the meter).
            GenerationError: If the output does not fill the measure exactly.
        """
        level = _validate_complexity(complexity)
        parsed = meter if isinstance(meter, Meter) else validate_meter(meter)

        if level <= LOW_COMPLEXITY_LIMIT and parsed.kind is MeterKind.SIMPLE:
            events = self._fill_low_complexity(parsed, level)
        else:
            events = self._fill_cells(parsed, level)

        logger.debug("Rhythm %s c%d: %s", parsed, level, events)
        return _check_sum(events, parsed)

    def generate_measures(self, meter: str | Meter, complexity: int, measures: int) -> list[list[int]]:
        parsed = meter if isinstance(meter, Meter) else validate_meter(meter)
        return [self.generate(parsed, complexity) for _ in range(measures)]

    # -- low-complexity regime ----------------------------------------------

    def _fill_low_complexity(self, meter: Meter, complexity: int) -> list[int]:
        weights = LOW_COMPLEXITY_WEIGHTS[complexity]
        beat = meter.beat_length
        remaining = meter.measure_length
        position = Fraction(0)
        events: list[int] = []

        while remaining > 0:
            room = remaining
            offset = position % beat
            if offset:
                room = min(room, beat - offset)

            candidates = [d for d in weights if event_length(d) <= room]
            if candidates:
                chosen = weighted_choice(candidates, [weights[d] for d in candidates], self.rng)
            elif event_length(meter.unit) <= room:
                chosen = meter.unit
            else:
                raise GenerationError(f"No note value fits {room} at position {position} in {meter}.")

            events.append(chosen)
            position += event_length(chosen)
            remaining -= event_length(chosen)
        return events

    # -- cell regime ----------------------------------------------------------

    def _fill_cells(self, meter: Meter, complexity: int) -> list[int]:
        tier = math.ceil(complexity / 2)
        events: list[int] = []
        after_run = False

        for index, units in enumerate(grouping_plan(meter)):
            duration = meter.beat_length * units
            cells = RHYTHMIC_CELLS.get(duration, {}).get(tier, ())
            if not cells:
                # No cells for this group length: one note per unit.
                events.extend([meter.unit] * units)
                after_run = False
                continue

            weights = [cell_weight(cell, index, meter, complexity, after_run) for cell in cells]
            cell = weighted_choice(cells, weights, self.rng)
            events.extend(cell)
            after_run = _is_sixteenth_run(cell)
        return events


def generate_rhythm(
    meter: str,
    complexity: int,
    rng: np.random.Generator | int | None = None,
) -> list[int]:
    """Convenience wrapper around ``RhythmGenerator(rng).generate``."""
    return RhythmGenerator(rng=rng).generate(meter, complexity)
