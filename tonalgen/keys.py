"""Key Resolver: turns a free-form key name into a canonical KeyDescriptor."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Final

from music21 import key as m21key

from tonalgen.chord_symbols import ChordDescriptor, to_music21_name, transpose_name, triad_quality
from tonalgen.errors import InvalidKey

logger = logging.getLogger(__name__)

MAJOR: Final = "major"
MINOR: Final = "minor"

# ── Scale interval tables ───────────────────────────────────────────────────

MAJOR_STEPS: Final[tuple[str, ...]] = ("P1", "M2", "M3", "P4", "P5", "M6", "M7")
NATURAL_MINOR_STEPS: Final[tuple[str, ...]] = ("P1", "M2", "m3", "P4", "P5", "m6", "m7")
HARMONIC_MINOR_STEPS: Final[tuple[str, ...]] = ("P1", "M2", "m3", "P4", "P5", "m6", "M7")
MELODIC_MINOR_STEPS: Final[tuple[str, ...]] = ("P1", "M2", "m3", "P4", "P5", "M6", "M7")

#: Largest key signature (in sharps or flats) that still counts as a canonical spelling.
MAX_SIGNATURE_ACCIDENTALS: Final = 7

_KEY_PATTERN: Final = re.compile(
    r"^\s*(?P<letter>[A-Ga-g])(?P<accidental>[#b]?)\s*(?P<mode>[A-Za-z]*)\s*$"
)

_MODE_KEYWORDS: Final[dict[str, str]] = {
    "": MAJOR,
    "major": MAJOR,
    "maj": MAJOR,
    "minor": MINOR,
    "min": MINOR,
    "m": MINOR,
}


@dataclass(frozen=True)
class ScaleVariant:
    """One form of the minor scale with its seven diatonic triads."""

    scale: tuple[str, ...]
    chords: tuple[str, ...]


@dataclass(frozen=True)
class KeyDescriptor:
    """
    Canonical description of a key.

    Attributes:
        tonic:    Tonic spelling, e.g. "F#" or "Bb".
        mode:     "major" or "minor".
        scale:    The seven scale spellings (natural minor for minor keys).
        chords:   Diatonic triad symbols built on ``scale``.
        natural:  Natural minor variant (minor keys only).
        harmonic: Harmonic minor variant (minor keys only).
        melodic:  Ascending melodic minor variant (minor keys only).
    """

    tonic: str
    mode: str
    scale: tuple[str, ...]
    chords: tuple[str, ...]
    natural: ScaleVariant | None = None
    harmonic: ScaleVariant | None = None
    melodic: ScaleVariant | None = None

    @property
    def name(self) -> str:
        return f"{self.tonic} {self.mode}"


def _build_scale(tonic: str, steps: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(transpose_name(tonic, step) for step in steps)


def _diatonic_triads(scale: tuple[str, ...]) -> tuple[str, ...]:
    """Stack thirds on every degree of a seven-note scale."""
    chords: list[str] = []
    for degree, root in enumerate(scale):
        quality = triad_quality(root, scale[(degree + 2) % 7], scale[(degree + 4) % 7])
        chords.append(ChordDescriptor(root=root, quality=quality).symbol)
    return tuple(chords)


def _variant(tonic: str, steps: tuple[str, ...]) -> ScaleVariant:
    scale = _build_scale(tonic, steps)
    return ScaleVariant(scale=scale, chords=_diatonic_triads(scale))


def build_key(tonic: str, mode: str) -> KeyDescriptor:
    """
    Build the descriptor for an already-canonical tonic spelling.

    No spelling validation happens here; use ``resolve_key`` for user input.
    Secondary-dominant resolution uses this directly to tonicize a degree.
    """
    if mode == MAJOR:
        scale = _build_scale(tonic, MAJOR_STEPS)
        return KeyDescriptor(tonic=tonic, mode=MAJOR, scale=scale, chords=_diatonic_triads(scale))

    natural = _variant(tonic, NATURAL_MINOR_STEPS)
    return KeyDescriptor(
        tonic=tonic,
        mode=MINOR,
        scale=natural.scale,
        chords=natural.chords,
        natural=natural,
        harmonic=_variant(tonic, HARMONIC_MINOR_STEPS),
        melodic=_variant(tonic, MELODIC_MINOR_STEPS),
    )


def _is_canonical_tonic(tonic: str) -> bool:
    """A tonic is canonical when it heads a major or minor key of at most seven accidentals."""
    m21_tonic = to_music21_name(tonic)
    return any(
        abs(m21key.Key(m21_tonic, mode).sharps) <= MAX_SIGNATURE_ACCIDENTALS
        for mode in (MAJOR, MINOR)
    )


def resolve_key(name: str) -> KeyDescriptor:
    """
    Parse a free-form key name such as "C", "f#  min", "Bbm" or "G Major".

    The mode keyword is case-insensitive, except that a lone upper-case "M"
    means major. The tonic letter is normalized to upper case while the
    accidental keeps its case.

    Raises:
        InvalidKey: If the tonic is not a canonical spelling or no mode
            can be inferred.
    """
    match = _KEY_PATTERN.match(name or "")
    if not match:
        raise InvalidKey(f"Could not parse key name '{name}'.")

    tonic = match.group("letter").upper() + match.group("accidental")
    mode_text = match.group("mode")
    mode = MAJOR if mode_text == "M" else _MODE_KEYWORDS.get(mode_text.lower())
    if mode is None:
        raise InvalidKey(f"Could not infer a mode from '{mode_text}' in key name '{name}'.")
    if not _is_canonical_tonic(tonic):
        raise InvalidKey(f"Tonic '{tonic}' in key name '{name}' has no canonical key signature.")

    descriptor = build_key(tonic, mode)
    logger.debug("Resolved key %r -> %s", name, descriptor.name)
    return descriptor
