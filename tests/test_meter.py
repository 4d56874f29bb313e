"""Unit tests for meter validation."""

from fractions import Fraction

import pytest

from tonalgen.errors import InvalidInput, InvalidMeter
from tonalgen.meter import Meter, MeterKind, validate_meter


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("4/4", (4, 4)),
        (" 6 / 8", (6, 8)),
        ("03/04", (3, 4)),
        ("2/2", (2, 2)),
        ("12/8", (12, 8)),
        ("7/8", (7, 8)),
    ],
)
def test_validate_meter_accepts_supported_meters(text: str, expected: tuple[int, int]) -> None:
    assert validate_meter(text) == expected


@pytest.mark.parametrize("text", ["13/8", "8/4", "4/3", "0/4", "4/0", "-3/4", "abc", "4/4/4", "", "3/16", "4 4"])
def test_validate_meter_rejects(text: str) -> None:
    with pytest.raises(InvalidMeter):
        validate_meter(text)


def test_invalid_meter_is_invalid_input() -> None:
    with pytest.raises(InvalidInput):
        validate_meter("9/4")


def test_meter_unpacks_and_measures() -> None:
    beats, unit = validate_meter("6/8")
    assert (beats, unit) == (6, 8)
    meter = Meter(6, 8)
    assert meter.measure_length == Fraction(3, 4)
    assert meter.beat_length == Fraction(1, 8)
    assert str(meter) == "6/8"


@pytest.mark.parametrize(
    ("meter", "kind"),
    [
        (Meter(4, 4), MeterKind.SIMPLE),
        (Meter(3, 8), MeterKind.SIMPLE),
        (Meter(9, 8), MeterKind.COMPOUND),
        (Meter(5, 4), MeterKind.ADDITIVE),
        (Meter(7, 8), MeterKind.ADDITIVE),
    ],
)
def test_meter_kind(meter: Meter, kind: MeterKind) -> None:
    assert meter.kind is kind


@pytest.mark.parametrize("text", ["٣/4", "4/４", "٤/٤"])
def test_validate_meter_rejects_non_ascii_digits(text: str) -> None:
    with pytest.raises(InvalidMeter):
        validate_meter(text)
