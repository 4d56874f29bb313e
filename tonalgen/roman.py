"""Roman Numeral Parser: splits chord symbols like "V65/IV" or "iiø7" into parts."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from tonalgen.errors import MusicTheoryError

ROOT_POSITION: Final = "1"

_NUMERAL: Final = r"VII|VI|V|IV|III|II|I|vii|vi|v|iv|iii|ii|i"
_QUALITY: Final = r"dim|o|°|ø|hd|aug|\+|sus4|sus|maj|Maj|M|min|m"

BASE_ROMAN_PATTERN: Final = re.compile(
    rf"^(?P<accidental>[#b]?)(?P<numeral>{_NUMERAL})"
    rf"(?P<quality>{_QUALITY})?(?P<seventh>7)?(?P<suspension>sus4|sus)?$"
)
SECONDARY_PATTERN: Final = re.compile(rf"^(?P<accidental>[#b]?)(?P<numeral>{_NUMERAL})$")

ROMAN_DEGREES: Final[dict[str, int]] = {
    "I": 0,
    "II": 1,
    "III": 2,
    "IV": 3,
    "V": 4,
    "VI": 5,
    "VII": 6,
}

# Longest figures first so "65" wins over a bare trailing digit.
FIGURES: Final[tuple[str, ...]] = ("64", "65", "43", "42", "6", "2")

#: Figured-bass suffix -> generic interval of the bass above the root.
FIGURE_BASS_INTERVALS: Final[dict[str, str]] = {
    "6": "3",
    "64": "5",
    "65": "3",
    "43": "5",
    "42": "7",
    "2": "7",
}

#: Figures that only make sense for a seventh chord.
SEVENTH_FIGURES: Final[frozenset[str]] = frozenset({"65", "43", "42", "2"})


@dataclass(frozen=True)
class ParsedRomanNumeral:
    """
    A Roman numeral split into its base and its bass indicator.

    Attributes:
        base_roman:     Numeral plus inline quality, case preserved (e.g. "iiø7").
        bass_interval:  Interval token of the bass above the root; "1" for root position.
        figure:         The figured-bass suffix that produced ``bass_interval``, if any.
        secondary:      Target numeral of a secondary relation ("IV" in "V65/IV"), if any.
    """

    base_roman: str
    bass_interval: str = ROOT_POSITION
    figure: str | None = None
    secondary: str | None = None

    def _part(self, group: str) -> str:
        match = BASE_ROMAN_PATTERN.match(self.base_roman)
        if not match:
            raise MusicTheoryError(f"Invalid base Roman numeral '{self.base_roman}'.")
        return match.group(group) or ""

    @property
    def accidental(self) -> str:
        return self._part("accidental")

    @property
    def numeral(self) -> str:
        return self._part("numeral")

    @property
    def quality(self) -> str:
        return self._part("quality")

    @property
    def suspension(self) -> str:
        return self._part("suspension")

    @property
    def degree_index(self) -> int:
        """Zero-based scale degree (I -> 0 ... VII -> 6)."""
        return ROMAN_DEGREES[self.numeral.upper()]

    @property
    def wants_seventh(self) -> bool:
        """True when the numeral or its figure asks for a seventh chord."""
        return bool(self._part("seventh")) or self.figure in SEVENTH_FIGURES

    @property
    def is_root_position(self) -> bool:
        return self.bass_interval == ROOT_POSITION


def _split_figure(text: str, original: str) -> tuple[str, str | None]:
    for figure in FIGURES:
        if text.endswith(figure) and BASE_ROMAN_PATTERN.match(text[: -len(figure)]):
            return text[: -len(figure)], figure
    if BASE_ROMAN_PATTERN.match(text):
        return text, None
    raise MusicTheoryError(f"Could not parse base Roman numeral from '{original}'. Check format.")


def parse_roman_numeral(text: str) -> ParsedRomanNumeral:
    """
    Decompose a Roman-numeral chord symbol.

    Exactly one bass notation applies: a slash interval ("I/5"), a
    figured-bass suffix ("V65"), or the root-position default. A slash
    followed by another numeral ("V7/V") is a secondary relation and may be
    combined with a figure before the slash.

    Slash intervals are taken verbatim; a malformed interval only fails
    once the chord is materialized.

    Raises:
        MusicTheoryError: If the base numeral does not match the grammar.
    """
    stripped = (text or "").strip()
    if not stripped:
        raise MusicTheoryError("Could not parse base Roman numeral from an empty string.")

    if "/" not in stripped:
        base, figure = _split_figure(stripped, stripped)
        bass = FIGURE_BASS_INTERVALS[figure] if figure else ROOT_POSITION
        return ParsedRomanNumeral(base_roman=base, bass_interval=bass, figure=figure)

    head, _, tail = stripped.partition("/")
    head, tail = head.strip(), tail.strip()
    if not head or not tail:
        raise MusicTheoryError(f"Slash notation in '{stripped}' needs text on both sides.")

    if SECONDARY_PATTERN.match(tail):
        base, figure = _split_figure(head, stripped)
        bass = FIGURE_BASS_INTERVALS[figure] if figure else ROOT_POSITION
        return ParsedRomanNumeral(base_roman=base, bass_interval=bass, figure=figure, secondary=tail)

    if not BASE_ROMAN_PATTERN.match(head):
        raise MusicTheoryError(f"Could not parse base Roman numeral from '{stripped}'. Check format.")
    return ParsedRomanNumeral(base_roman=head, bass_interval=tail)
