"""Meter Validator: parses and checks ``beats/unit`` time signatures."""

from __future__ import annotations

import logging
import re
from enum import Enum
from fractions import Fraction
from typing import Final, NamedTuple

from tonalgen.errors import InvalidMeter

logger = logging.getLogger(__name__)

ALLOWED_UNITS: Final[frozenset[int]] = frozenset({1, 2, 4, 8, 16, 32})

#: Curated meters: unit -> numerators accepted for that unit.
SUPPORTED_METERS: Final[dict[int, frozenset[int]]] = {
    2: frozenset({2}),
    4: frozenset({2, 3, 4, 5, 7}),
    8: frozenset({3, 5, 6, 7, 9, 12}),
}

_METER_PATTERN: Final = re.compile(r"^\s*([0-9]+)\s*/\s*([0-9]+)\s*$")


class MeterKind(Enum):
    SIMPLE = "simple"
    COMPOUND = "compound"
    ADDITIVE = "additive"


class Meter(NamedTuple):
    """A validated time signature; unpacks as ``(beats, unit)``."""

    beats: int
    unit: int

    @property
    def measure_length(self) -> Fraction:
        """Length of one measure as a fraction of a whole note."""
        return Fraction(self.beats, self.unit)

    @property
    def beat_length(self) -> Fraction:
        return Fraction(1, self.unit)

    @property
    def kind(self) -> MeterKind:
        if self.unit == 8 and self.beats in (6, 9, 12):
            return MeterKind.COMPOUND
        if self.beats in (5, 7):
            return MeterKind.ADDITIVE
        return MeterKind.SIMPLE

    def __str__(self) -> str:
        return f"{self.beats}/{self.unit}"


def validate_meter(text: str) -> Meter:
    """
    Parse a time signature such as "4/4", " 6 / 8" or "03/04".

    Args:
        text: Two slash-separated integer fields.

    Returns:
        The validated Meter.

    Raises:
        InvalidMeter: On malformed text, non-positive fields, a unit that is
            not a power of two up to 32, or an unsupported combination.
    """
    if not isinstance(text, str):
        raise InvalidMeter(f"Meter must be a string like '4/4', got {text!r}.")

    match = _METER_PATTERN.match(text)
    if not match:
        raise InvalidMeter(f"Invalid meter string '{text}'. Expected 'beats/unit', e.g. '4/4'.")

    beats, unit = int(match.group(1)), int(match.group(2))
    if beats <= 0 or unit <= 0:
        raise InvalidMeter(f"Meter fields must be positive integers in '{text}'.")
    if unit not in ALLOWED_UNITS:
        allowed = ", ".join(str(u) for u in sorted(ALLOWED_UNITS))
        raise InvalidMeter(f"Unsupported beat unit {unit} in '{text}'. Use one of: {allowed}.")
    if beats not in SUPPORTED_METERS.get(unit, frozenset()):
        raise InvalidMeter(f"Unsupported or uncommon meter '{text}'.")

    meter = Meter(beats=beats, unit=unit)
    logger.debug("Validated meter %r -> %s (%s)", text, meter, meter.kind.value)
    return meter
