"""Structured chord descriptors and the symbol-string renderer/parser pair."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Final

from music21 import pitch as m21pitch

from tonalgen.errors import MusicTheoryError

_ROOT_PATTERN: Final = re.compile(r"^(?P<root>[A-G](?:#{1,3}|b{1,3})?)(?P<suffix>.*)$")


def to_music21_name(name: str) -> str:
    """Convert a spelling such as ``"Bb"`` to music21's ``"B-"``."""
    return name[:1] + name[1:].replace("b", "-")


def from_music21_name(name: str) -> str:
    """Convert a music21 spelling such as ``"E-4"`` back to ``"Eb4"``."""
    return name.replace("-", "b")


def pitch_class_of(name: str) -> int:
    """Pitch class (0-11) of a note name with or without octave."""
    return m21pitch.Pitch(to_music21_name(name)).pitchClass


def transpose_name(name: str, interval_name: str) -> str:
    """Transpose a note name (optionally with octave) by a music21 interval name."""
    transposed = m21pitch.Pitch(to_music21_name(name)).transpose(interval_name)
    spelled = from_music21_name(transposed.name)
    if any(ch.isdigit() for ch in name):
        return f"{spelled}{transposed.octave}"
    return spelled


class ChordQuality(Enum):
    """Chord qualities known to the engine; the value is the symbol suffix."""

    MAJOR = "M"
    MINOR = "m"
    DIMINISHED = "dim"
    AUGMENTED = "aug"
    SUSPENDED = "sus4"
    DOMINANT_SEVENTH = "7"
    MAJOR_SEVENTH = "maj7"
    MINOR_SEVENTH = "m7"
    MINOR_MAJOR_SEVENTH = "mMaj7"
    HALF_DIMINISHED_SEVENTH = "m7b5"
    DIMINISHED_SEVENTH = "dim7"
    AUGMENTED_SEVENTH = "7#5"
    SUSPENDED_SEVENTH = "7sus4"

    @property
    def intervals(self) -> tuple[str, ...]:
        """Interval structure above the root as music21 interval names."""
        return _QUALITY_INTERVALS[self]

    @property
    def triad(self) -> ChordQuality:
        """The triad quality this chord is built on (itself for triads)."""
        return _TRIAD_OF.get(self, self)

    @property
    def is_seventh(self) -> bool:
        return len(self.intervals) == 4


_QUALITY_INTERVALS: Final[dict[ChordQuality, tuple[str, ...]]] = {
    ChordQuality.MAJOR: ("P1", "M3", "P5"),
    ChordQuality.MINOR: ("P1", "m3", "P5"),
    ChordQuality.DIMINISHED: ("P1", "m3", "d5"),
    ChordQuality.AUGMENTED: ("P1", "M3", "A5"),
    ChordQuality.SUSPENDED: ("P1", "P4", "P5"),
    ChordQuality.DOMINANT_SEVENTH: ("P1", "M3", "P5", "m7"),
    ChordQuality.MAJOR_SEVENTH: ("P1", "M3", "P5", "M7"),
    ChordQuality.MINOR_SEVENTH: ("P1", "m3", "P5", "m7"),
    ChordQuality.MINOR_MAJOR_SEVENTH: ("P1", "m3", "P5", "M7"),
    ChordQuality.HALF_DIMINISHED_SEVENTH: ("P1", "m3", "d5", "m7"),
    ChordQuality.DIMINISHED_SEVENTH: ("P1", "m3", "d5", "d7"),
    ChordQuality.AUGMENTED_SEVENTH: ("P1", "M3", "A5", "m7"),
    ChordQuality.SUSPENDED_SEVENTH: ("P1", "P4", "P5", "m7"),
}

_TRIAD_OF: Final[dict[ChordQuality, ChordQuality]] = {
    ChordQuality.DOMINANT_SEVENTH: ChordQuality.MAJOR,
    ChordQuality.MAJOR_SEVENTH: ChordQuality.MAJOR,
    ChordQuality.MINOR_SEVENTH: ChordQuality.MINOR,
    ChordQuality.MINOR_MAJOR_SEVENTH: ChordQuality.MINOR,
    ChordQuality.HALF_DIMINISHED_SEVENTH: ChordQuality.DIMINISHED,
    ChordQuality.DIMINISHED_SEVENTH: ChordQuality.DIMINISHED,
    ChordQuality.AUGMENTED_SEVENTH: ChordQuality.AUGMENTED,
    ChordQuality.SUSPENDED_SEVENTH: ChordQuality.SUSPENDED,
}

#: Standard seventh chords, keyed by (triad quality, seventh interval above the root).
SEVENTH_CHORDS: Final[dict[tuple[ChordQuality, str], ChordQuality]] = {
    (ChordQuality.MAJOR, "m7"): ChordQuality.DOMINANT_SEVENTH,
    (ChordQuality.MAJOR, "M7"): ChordQuality.MAJOR_SEVENTH,
    (ChordQuality.MINOR, "m7"): ChordQuality.MINOR_SEVENTH,
    (ChordQuality.MINOR, "M7"): ChordQuality.MINOR_MAJOR_SEVENTH,
    (ChordQuality.DIMINISHED, "m7"): ChordQuality.HALF_DIMINISHED_SEVENTH,
    (ChordQuality.DIMINISHED, "d7"): ChordQuality.DIMINISHED_SEVENTH,
    (ChordQuality.SUSPENDED, "m7"): ChordQuality.SUSPENDED_SEVENTH,
}

#: Seventh chord used when a triad cannot take the requested seventh.
NEAREST_SEVENTH: Final[dict[ChordQuality, ChordQuality]] = {
    ChordQuality.MAJOR: ChordQuality.DOMINANT_SEVENTH,
    ChordQuality.MINOR: ChordQuality.MINOR_SEVENTH,
    ChordQuality.DIMINISHED: ChordQuality.DIMINISHED_SEVENTH,
    ChordQuality.AUGMENTED: ChordQuality.AUGMENTED_SEVENTH,
    ChordQuality.SUSPENDED: ChordQuality.SUSPENDED_SEVENTH,
}

_SUFFIX_ALIASES: Final[dict[str, ChordQuality]] = {
    "": ChordQuality.MAJOR,
    "maj": ChordQuality.MAJOR,
    "min": ChordQuality.MINOR,
    "o": ChordQuality.DIMINISHED,
    "°": ChordQuality.DIMINISHED,
    "+": ChordQuality.AUGMENTED,
    "sus": ChordQuality.SUSPENDED,
    "M7": ChordQuality.MAJOR_SEVENTH,
    "Maj7": ChordQuality.MAJOR_SEVENTH,
    "ø7": ChordQuality.HALF_DIMINISHED_SEVENTH,
    "ø": ChordQuality.HALF_DIMINISHED_SEVENTH,
    "°7": ChordQuality.DIMINISHED_SEVENTH,
    "o7": ChordQuality.DIMINISHED_SEVENTH,
    "+7": ChordQuality.AUGMENTED_SEVENTH,
    "aug7": ChordQuality.AUGMENTED_SEVENTH,
    "7sus": ChordQuality.SUSPENDED_SEVENTH,
}

_TRIAD_BY_SEMITONES: Final[dict[tuple[int, int], ChordQuality]] = {
    (4, 7): ChordQuality.MAJOR,
    (3, 7): ChordQuality.MINOR,
    (3, 6): ChordQuality.DIMINISHED,
    (4, 8): ChordQuality.AUGMENTED,
}


def triad_quality(root: str, third: str, fifth: str) -> ChordQuality:
    """
    Classify the tertian triad stacked from three note names.

    Raises:
        MusicTheoryError: If the stack is not a major, minor, diminished
            or augmented triad.
    """
    root_pc = pitch_class_of(root)
    key = ((pitch_class_of(third) - root_pc) % 12, (pitch_class_of(fifth) - root_pc) % 12)
    try:
        return _TRIAD_BY_SEMITONES[key]
    except KeyError:
        raise MusicTheoryError(f"Notes {root}-{third}-{fifth} do not form a tertian triad.") from None


@dataclass(frozen=True)
class ChordDescriptor:
    """
    A chord as a root spelling plus a quality.

    Attributes:
        root:    Root spelling with at most three accidentals, e.g. "F#" or "Bb".
        quality: The chord quality.
    """

    root: str
    quality: ChordQuality

    @property
    def symbol(self) -> str:
        """Rendered chord symbol, e.g. 'CM', 'F#dim7' or 'G7'."""
        return f"{self.root}{self.quality.value}"

    @property
    def root_pitch_class(self) -> int:
        return pitch_class_of(self.root)

    def with_quality(self, quality: ChordQuality) -> ChordDescriptor:
        return ChordDescriptor(root=self.root, quality=quality)

    def note_names(self) -> list[str]:
        """Pitch-class spellings of the chord members in root position."""
        return [transpose_name(self.root, iv) for iv in self.quality.intervals]

    def __str__(self) -> str:
        return self.symbol


def parse_chord_symbol(symbol: str) -> ChordDescriptor:
    """
    Parse a chord symbol string into a ChordDescriptor.

    Args:
        symbol: A symbol such as "CM", "Bdim", "F#dim7" or "Ebmaj7".

    Returns:
        The structured descriptor.

    Raises:
        MusicTheoryError: If the symbol is empty or its suffix is unknown.
    """
    text = (symbol or "").strip()
    match = _ROOT_PATTERN.match(text)
    if not match:
        raise MusicTheoryError(f"Unrecognized chord symbol '{symbol}'.")

    suffix = match.group("suffix")
    quality = _SUFFIX_ALIASES.get(suffix)
    if quality is None:
        try:
            quality = ChordQuality(suffix)
        except ValueError:
            raise MusicTheoryError(f"Unrecognized chord symbol '{symbol}'.") from None
    return ChordDescriptor(root=match.group("root"), quality=quality)
