"""Unit tests for the rhythm generator."""

from fractions import Fraction

import numpy as np
import pytest

from tonalgen.errors import InvalidInput, InvalidMeter
from tonalgen.meter import Meter
from tonalgen.rhythm import (
    RHYTHMIC_CELLS,
    RhythmGenerator,
    cell_weight,
    event_length,
    generate_rhythm,
    grouping_plan,
    total_length,
)

ALL_METERS = ["2/4", "3/4", "4/4", "5/4", "7/4", "2/2", "3/8", "5/8", "6/8", "7/8", "9/8", "12/8"]


def _rng(seed: int = 2024) -> np.random.Generator:
    return np.random.default_rng(seed)


@pytest.mark.parametrize("meter", ALL_METERS)
def test_every_measure_fills_exactly(meter: str) -> None:
    beats, unit = (int(part) for part in meter.split("/"))
    generator = RhythmGenerator(rng=_rng(beats * unit))
    for complexity in range(1, 11):
        for _ in range(5):
            events = generator.generate(meter, complexity)
            assert total_length(events) == Fraction(beats, unit)
            assert all(e != 0 for e in events)


def test_low_complexity_uses_long_values_only() -> None:
    generator = RhythmGenerator(rng=_rng())
    for _ in range(20):
        assert set(generator.generate("4/4", 1)) <= {1, 2, 4}
        assert set(generator.generate("3/4", 2)) <= {1, 2, 4}


def test_low_complexity_has_no_rests() -> None:
    generator = RhythmGenerator(rng=_rng())
    for complexity in range(1, 5):
        for _ in range(10):
            assert all(e > 0 for e in generator.generate("4/4", complexity))


def test_eighths_appear_at_complexity_three() -> None:
    generator = RhythmGenerator(rng=_rng())
    assert any(8 in generator.generate("4/4", 3) for _ in range(30))


@pytest.mark.parametrize("meter", ["4/4", "3/4", "2/2", "2/4"])
def test_off_beat_notes_end_by_next_beat(meter: str) -> None:
    parsed = Meter(*(int(part) for part in meter.split("/")))
    generator = RhythmGenerator(rng=_rng())
    for complexity in (3, 4):
        for _ in range(20):
            position = Fraction(0)
            for event in generator.generate(parsed, complexity):
                offset = position % parsed.beat_length
                if offset:
                    assert event_length(event) <= parsed.beat_length - offset
                position += event_length(event)


def test_compound_meter_uses_cells_at_low_complexity() -> None:
    generator = RhythmGenerator(rng=_rng())
    for _ in range(20):
        events = generator.generate("6/8", 1)
        assert set(events) <= {8, 4}
        assert total_length(events) == Fraction(3, 4)


@pytest.mark.parametrize("meter", ["5/4", "7/4", "5/8", "7/8"])
def test_additive_meter_events_stay_inside_beat_groups(meter: str) -> None:
    parsed = Meter(*(int(part) for part in meter.split("/")))
    bounds = []
    position = Fraction(0)
    for units in grouping_plan(parsed):
        position += parsed.beat_length * units
        bounds.append(position)

    generator = RhythmGenerator(rng=_rng())
    for complexity in range(1, 11):
        for _ in range(10):
            start = Fraction(0)
            for event in generator.generate(parsed, complexity):
                end = start + event_length(event)
                assert not any(start < bound < end for bound in bounds), (complexity, event, start)
                start = end


def test_additive_meter_uses_cells_at_low_complexity() -> None:
    generator = RhythmGenerator(rng=_rng())
    for _ in range(20):
        events = generator.generate("5/8", 1)
        assert 2 not in events
        assert events[:3] == [8, 8, 8] or events[:2] == [4, 8]


def test_group_without_cells_splits_into_units() -> None:
    events = RhythmGenerator(rng=_rng()).generate("5/4", 6)
    assert events[:3] == [4, 4, 4]


@pytest.mark.parametrize(
    ("meter", "plan"),
    [
        (Meter(4, 4), (1, 1, 1, 1)),
        (Meter(3, 8), (3,)),
        (Meter(12, 8), (3, 3, 3, 3)),
        (Meter(5, 4), (3, 2)),
        (Meter(7, 4), (3, 2, 2)),
        (Meter(5, 8), (3, 2)),
        (Meter(7, 8), (2, 2, 3)),
    ],
)
def test_grouping_plan(meter: Meter, plan: tuple[int, ...]) -> None:
    assert grouping_plan(meter) == plan


def test_cell_library_cells_fill_their_group() -> None:
    for duration, tiers in RHYTHMIC_CELLS.items():
        assert set(tiers) == {1, 2, 3, 4, 5}
        for cells in tiers.values():
            for cell in cells:
                assert total_length(cell) == duration


def test_rest_weighting_on_strong_beats() -> None:
    four_four = Meter(4, 4)
    assert cell_weight((-8, 8), 0, four_four, 6, False) == pytest.approx(0.1)
    assert cell_weight((-8, 8), 2, four_four, 6, False) == pytest.approx(0.1)
    assert cell_weight((-8, 8), 1, four_four, 6, False) == pytest.approx(1.0)
    assert cell_weight((-8, 8), 0, four_four, 3, False) == pytest.approx(0.05)
    assert cell_weight((-8, 8), 2, Meter(3, 4), 6, False) == pytest.approx(1.0)


def test_sixteenth_run_tempering() -> None:
    meter = Meter(4, 4)
    run = (16, 16, 16, 16)
    assert cell_weight(run, 1, meter, 6, True) == pytest.approx(0.4)
    assert cell_weight(run, 1, meter, 9, True) == pytest.approx(1.5)
    assert cell_weight(run, 1, meter, 6, False) == pytest.approx(1.0)
    assert cell_weight((8, 8), 1, meter, 6, True) == pytest.approx(1.0)


def test_generate_measures() -> None:
    bars = RhythmGenerator(rng=_rng()).generate_measures("3/4", 7, 4)
    assert len(bars) == 4
    assert all(total_length(bar) == Fraction(3, 4) for bar in bars)


def test_seeded_generation_is_deterministic() -> None:
    assert generate_rhythm("4/4", 8, rng=11) == generate_rhythm("4/4", 8, rng=11)


@pytest.mark.parametrize("complexity", [0, 11, -1, 2.5, 3.0, True, "3", None])
def test_invalid_complexity(complexity) -> None:
    with pytest.raises(InvalidInput):
        generate_rhythm("4/4", complexity, rng=_rng())


@pytest.mark.parametrize("meter", ["13/8", "8/4", "4/3", "x"])
def test_invalid_meter(meter: str) -> None:
    with pytest.raises(InvalidMeter):
        generate_rhythm(meter, 3, rng=_rng())
