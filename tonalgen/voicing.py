"""Chord Materializer and Extended Pool Builder: chord symbols to absolute MIDI pitches."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Final

import numpy as np
from music21 import pitch as m21pitch

from tonalgen.chord_symbols import (
    ChordDescriptor,
    from_music21_name,
    parse_chord_symbol,
    pitch_class_of,
    to_music21_name,
    transpose_name,
)
from tonalgen.errors import InvalidInput, MusicTheoryError
from tonalgen.keys import MAJOR, MINOR

logger = logging.getLogger(__name__)

# ── MIDI constants ──────────────────────────────────────────────────────────
SEMITONES_PER_OCTAVE: Final = 12

#: Standard 88-key piano range, A0 .. C8.
PIANO_LOWEST_MIDI: Final = 21
PIANO_HIGHEST_MIDI: Final = 108

#: Lowest materialized chord root, C2.
ROOT_LOWEST_MIDI: Final = 36

#: Roots this many semitones (or more) above the key tonic drop an octave.
LOW_OCTAVE_THRESHOLD: Final = 7

ROOT_POSITION_TOKENS: Final[frozenset[str]] = frozenset({"1", "1P", "P1"})

#: Interval of each generic scale step above a root, taken from the major scale.
MAJOR_SCALE_INTERVALS: Final[dict[int, str]] = {
    1: "P1",
    2: "M2",
    3: "M3",
    4: "P4",
    5: "P5",
    6: "M6",
    7: "M7",
}

_GENERIC_TOKEN: Final = re.compile(r"^(?P<accidentals>[#b]*)(?P<number>[1-7])$")
_NAMED_TOKEN: Final = re.compile(r"^(?P<specifier>P|M|m|A|d)(?P<number>[1-7])$")
_PERFECT_NUMBERS: Final[frozenset[int]] = frozenset({1, 4, 5})


def note_name_to_midi(name: str) -> int:
    """MIDI number of a spelled note with octave, e.g. "Cb3" -> 47."""
    return m21pitch.Pitch(to_music21_name(name)).midi


@dataclass(frozen=True)
class ChordInfo:
    """
    A chord materialized as concrete pitches.

    Attributes:
        final_chord_symbol: The resolved chord symbol, e.g. "C7".
        notes:              Root-position MIDI notes, ascending.
        note_names:         Spellings with octave matching ``notes``.
        required_bass_pc:   Pitch class the bass must sound, or None for root position.
                            It does not have to be a chord tone.
    """

    final_chord_symbol: str
    notes: tuple[int, ...]
    note_names: tuple[str, ...]
    required_bass_pc: int | None = None

    @property
    def pitch_classes(self) -> list[int]:
        return sorted({note % SEMITONES_PER_OCTAVE for note in self.notes})


# ── Register placement ──────────────────────────────────────────────────────

def guess_root_octave(root_pc: int, tonic_pc: int) -> int:
    """
    Pick the octave for a chord root relative to the key tonic.

    Roots that sit close above the tonic go in octave 3; roots a fifth or
    more above it go in octave 2, so that every degree of the key lands in
    a low-to-mid register.
    """
    distance = (root_pc - tonic_pc) % SEMITONES_PER_OCTAVE
    return 3 if distance < LOW_OCTAVE_THRESHOLD else 2


def _place_root(chord: ChordDescriptor, tonic: str) -> str:
    octave = guess_root_octave(chord.root_pitch_class, pitch_class_of(tonic))
    root_midi = note_name_to_midi(f"{chord.root}{octave}")
    if root_midi < ROOT_LOWEST_MIDI:
        octave += 1
    return f"{chord.root}{octave}"


# ── Bass interval resolution ────────────────────────────────────────────────

def _generic_number(interval_name: str) -> int:
    return int(interval_name.lstrip("PMmAd"))


def resolve_bass_pitch_class(chord: ChordDescriptor, bass_interval: str) -> int:
    """
    Transpose the chord root by a bass-interval token and return its pitch class.

    Accepted tokens are a generic number 1-7 with optional leading ``#``/``b``
    accidentals ("3", "b7", "#5") or a full interval name ("M3", "P5").
    A bare number picks the chord member at that distance when the chord
    has one, and otherwise the major-scale interval above the root.

    Raises:
        MusicTheoryError: If the token cannot be turned into a transposition.
    """
    token = (bass_interval or "").strip()

    named = _NAMED_TOKEN.match(token)
    if named:
        number = int(named.group("number"))
        is_perfect = named.group("specifier") == "P"
        if is_perfect != (number in _PERFECT_NUMBERS) and named.group("specifier") in "PMm":
            raise MusicTheoryError(f"Interval '{token}' does not exist.")
        return pitch_class_of(transpose_name(chord.root, token))

    generic = _GENERIC_TOKEN.match(token)
    if not generic:
        raise MusicTheoryError(
            f"Cannot resolve bass interval '{bass_interval}' for chord '{chord.symbol}'."
        )

    number = int(generic.group("number"))
    accidentals = generic.group("accidentals")
    interval_name = MAJOR_SCALE_INTERVALS[number]
    if not accidentals:
        for member in chord.quality.intervals:
            if _generic_number(member) == number:
                interval_name = member
                break

    shift = accidentals.count("#") - accidentals.count("b")
    bass_pc = pitch_class_of(transpose_name(chord.root, interval_name))
    return (bass_pc + shift) % SEMITONES_PER_OCTAVE


# ── Public API ──────────────────────────────────────────────────────────────

def materialize_chord(
    final_chord_symbol: str,
    bass_interval: str,
    mode: str,
    tonic: str,
) -> ChordInfo:
    """
    Expand a chord symbol into root-position MIDI notes near a guessed octave.

    Args:
        final_chord_symbol: Chord symbol such as "CM" or "F#dim7".
        bass_interval:      Bass token; "1" means root position.
        mode:               Mode of the key, "major" or "minor".
        tonic:              Key tonic, used to pick the root's register.

    Returns:
        ChordInfo with ascending notes, matching spellings and the required
        bass pitch class.

    Raises:
        InvalidInput: If ``mode`` is not "major" or "minor".
        MusicTheoryError: If the symbol is unrecognized or the bass token
            cannot be resolved.
    """
    if mode not in (MAJOR, MINOR):
        raise InvalidInput(f"Unknown key mode '{mode}'.")

    chord = parse_chord_symbol(final_chord_symbol)
    root_name = _place_root(chord, tonic)

    names = [transpose_name(root_name, iv) for iv in chord.quality.intervals]
    voiced = sorted(((note_name_to_midi(name), name) for name in names), key=lambda pair: pair[0])
    if not voiced:
        raise MusicTheoryError(f"No notes for chord symbol '{final_chord_symbol}'.")

    required_bass_pc = None
    if bass_interval not in ROOT_POSITION_TOKENS:
        required_bass_pc = resolve_bass_pitch_class(chord, bass_interval)
        logger.debug("Bass %r under %s -> pitch class %d", bass_interval, chord.symbol, required_bass_pc)

    return ChordInfo(
        final_chord_symbol=chord.symbol,
        notes=tuple(midi for midi, _ in voiced),
        note_names=tuple(name for _, name in voiced),
        required_bass_pc=required_bass_pc,
    )


def extend_pool(root_position_notes: list[int]) -> list[int]:
    """
    All piano keys sharing a pitch class with the given chord notes.

    Args:
        root_position_notes: Absolute MIDI pitches of the chord.

    Returns:
        Ascending MIDI numbers within [21, 108]; empty for empty input.
    """
    if len(root_position_notes) == 0:
        return []
    pitch_classes = np.unique(np.asarray(root_position_notes, dtype=int) % SEMITONES_PER_OCTAVE)
    keyboard = np.arange(PIANO_LOWEST_MIDI, PIANO_HIGHEST_MIDI + 1)
    return keyboard[np.isin(keyboard % SEMITONES_PER_OCTAVE, pitch_classes)].tolist()


def midi_to_note_name(midi: int | None) -> str | None:
    """Convert a MIDI number to its note name (60 -> "C4"); None when out of range."""
    if midi is None or isinstance(midi, bool) or not isinstance(midi, (int, np.integer)):
        return None
    if midi < 0 or midi > 127:
        return None
    p = m21pitch.Pitch(midi=int(midi))
    return f"{from_music21_name(p.name)}{p.octave}"


def is_in_range(midi_note: int, low: int, high: int) -> bool:
    """Inclusive range check; raises InvalidInput when ``low > high``."""
    if low > high:
        raise InvalidInput(f"Invalid range: low {low} is greater than high {high}.")
    return low <= midi_note <= high


def put_in_range(midi_note: int, low: int, high: int) -> int:
    """
    Shift a note by octaves into [low, high], keeping its pitch class.

    If no octave of the note fits, the result is clamped to the boundary
    the shifting overshot.
    """
    if is_in_range(midi_note, low, high):
        return midi_note

    note = midi_note
    if note < low:
        while note < low:
            note += SEMITONES_PER_OCTAVE
        return high if note > high else note

    while note > high:
        note -= SEMITONES_PER_OCTAVE
    return low if note < low else note
