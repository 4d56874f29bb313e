"""
Diatonic Chord Resolver, Chord Modifier and the ``resolve_chord`` entry point.

Resolution pipeline
-------------------
1. **Parse** - ``parse_roman_numeral`` splits "V65/IV" into base numeral,
   bass interval and an optional secondary target.

2. **Tonicize** - a secondary target ("/IV") swaps the home key for the key
   built on that degree before anything else happens.

3. **Diatonic chord** - the scale degree picks a triad from the key. Minor
   keys take V and vii from harmonic minor and every other degree from
   natural minor.

4. **Modify** - chromatic prefixes, explicit qualities and seventh requests
   are applied. Seventh requests go through an ordered list of
   construction strategies; the first one that yields a chord wins.

5. **Materialize** - ``materialize_chord`` turns the final symbol into MIDI
   notes and the required bass pitch class.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Final

from tonalgen.chord_symbols import (
    NEAREST_SEVENTH,
    SEVENTH_CHORDS,
    ChordDescriptor,
    ChordQuality,
    parse_chord_symbol,
)
from tonalgen.errors import InvalidInput, MusicTheoryError
from tonalgen.keys import MAJOR, MINOR, KeyDescriptor, build_key, resolve_key
from tonalgen.roman import SECONDARY_PATTERN, ROMAN_DEGREES, ParsedRomanNumeral, parse_roman_numeral
from tonalgen.voicing import ChordInfo, materialize_chord

logger = logging.getLogger(__name__)

DOMINANT_INDEX: Final = 4
LEADING_TONE_INDEX: Final = 6

#: Scale degrees that minor keys take from harmonic minor (raised 7th).
HARMONIC_MINOR_DEGREES: Final[frozenset[int]] = frozenset({DOMINANT_INDEX, LEADING_TONE_INDEX})

#: Seventh chord implied by a generic "7" on each degree of a major key.
MAJOR_KEY_DEFAULT_SEVENTHS: Final[dict[int, ChordQuality]] = {
    0: ChordQuality.MAJOR_SEVENTH,
    1: ChordQuality.MINOR_SEVENTH,
    2: ChordQuality.MINOR_SEVENTH,
    3: ChordQuality.MAJOR_SEVENTH,
    4: ChordQuality.DOMINANT_SEVENTH,
    5: ChordQuality.MINOR_SEVENTH,
    6: ChordQuality.HALF_DIMINISHED_SEVENTH,
}

# Natural-minor triads keep their diatonic seventh; harmonic-minor V and vii
# take the dominant and fully diminished sevenths.
_NATURAL_MINOR_SEVENTHS: Final[dict[ChordQuality, ChordQuality]] = {
    ChordQuality.MAJOR: ChordQuality.MAJOR_SEVENTH,
    ChordQuality.MINOR: ChordQuality.MINOR_SEVENTH,
    ChordQuality.DIMINISHED: ChordQuality.HALF_DIMINISHED_SEVENTH,
}
_HARMONIC_MINOR_SEVENTHS: Final[dict[ChordQuality, ChordQuality]] = {
    ChordQuality.MAJOR: ChordQuality.DOMINANT_SEVENTH,
    ChordQuality.DIMINISHED: ChordQuality.DIMINISHED_SEVENTH,
}

#: Inline quality tokens -> triad quality.
QUALITY_TOKENS: Final[dict[str, ChordQuality]] = {
    "dim": ChordQuality.DIMINISHED,
    "o": ChordQuality.DIMINISHED,
    "°": ChordQuality.DIMINISHED,
    "ø": ChordQuality.DIMINISHED,
    "hd": ChordQuality.DIMINISHED,
    "m": ChordQuality.MINOR,
    "min": ChordQuality.MINOR,
    "M": ChordQuality.MAJOR,
    "maj": ChordQuality.MAJOR,
    "Maj": ChordQuality.MAJOR,
    "aug": ChordQuality.AUGMENTED,
    "+": ChordQuality.AUGMENTED,
    "sus": ChordQuality.SUSPENDED,
    "sus4": ChordQuality.SUSPENDED,
}

_HALF_DIMINISHED_TOKENS: Final[frozenset[str]] = frozenset({"ø", "hd"})

#: Quality tokens that fix the seventh interval when followed by "7".
_EXPLICIT_SEVENTH_INTERVALS: Final[dict[str, str]] = {
    "dim": "d7",
    "o": "d7",
    "°": "d7",
    "ø": "m7",
    "hd": "m7",
    "m": "m7",
    "min": "m7",
    "M": "M7",
    "maj": "M7",
    "Maj": "M7",
}


def _alter_spelling(name: str, semitones: int) -> str:
    """Raise or lower a spelling by chromatic semitones: ("B", -1) -> "Bb"."""
    alteration = name.count("#") - name.count("b") + semitones
    return name[0] + ("#" * alteration if alteration > 0 else "b" * -alteration)


def _accidental_shift(accidental: str) -> int:
    return {"#": 1, "b": -1}.get(accidental, 0)


# ── Diatonic Chord Resolver ─────────────────────────────────────────────────

def diatonic_chord_symbol(degree_index: int, key: KeyDescriptor | None, numeral: str = "") -> str:
    """
    Diatonic triad symbol for a 0-based scale degree.

    Major keys index their single chord list. Minor keys use harmonic minor
    for V and vii and natural minor for the remaining degrees.

    Args:
        degree_index: 0 (I) through 6 (VII).
        key:          The key to draw from.
        numeral:      Only used to make error messages readable.

    Raises:
        InvalidInput: If ``key`` is missing.
        MusicTheoryError: If the index is out of range or the needed chord
            list is absent or too short.
    """
    if key is None:
        raise InvalidInput(f"Invalid key details provided for chord '{numeral}'.")
    if not 0 <= degree_index <= 6:
        raise MusicTheoryError(f"Scale degree index {degree_index} ({numeral}) is out of range 0-6.")

    if key.mode == MAJOR:
        chords, source = key.chords, "Key"
    elif degree_index in HARMONIC_MINOR_DEGREES:
        chords = key.harmonic.chords if key.harmonic else ()
        source = "Harmonic minor"
    else:
        chords = key.natural.chords if key.natural else ()
        source = "Natural minor"

    if len(chords) <= degree_index:
        raise MusicTheoryError(
            f"Diatonic chord for scale degree {degree_index} ({numeral}) not found in key "
            f"{key.name}. {source} chords array is too short or undefined."
        )
    return chords[degree_index]


# ── Chord Modifier ──────────────────────────────────────────────────────────

def default_seventh(key: KeyDescriptor, degree_index: int) -> ChordQuality:
    """
    Seventh chord implied by a generic "7" on a scale degree.

    Raises:
        MusicTheoryError: If a minor key lacks the variant the degree needs.
    """
    if key.mode == MAJOR:
        return MAJOR_KEY_DEFAULT_SEVENTHS[degree_index]

    triad = parse_chord_symbol(diatonic_chord_symbol(degree_index, key)).quality.triad
    table = _HARMONIC_MINOR_SEVENTHS if degree_index in HARMONIC_MINOR_DEGREES else _NATURAL_MINOR_SEVENTHS
    try:
        return table[triad]
    except KeyError:
        raise MusicTheoryError(
            f"No default seventh for a {triad.name.lower()} triad on degree {degree_index} of {key.name}."
        ) from None


def _seventh_interval(parsed: ParsedRomanNumeral, key: KeyDescriptor, degree_index: int) -> str | None:
    """Interval of the requested seventh above the root, or None when no seventh is wanted."""
    quality = parsed.quality
    if not (parsed.wants_seventh or quality in _HALF_DIMINISHED_TOKENS):
        return None
    explicit = _EXPLICIT_SEVENTH_INTERVALS.get(quality)
    if explicit:
        return explicit
    return default_seventh(key, degree_index).intervals[3]


def _seventh_strategies(
    modified: ChordDescriptor,
    diatonic: ChordDescriptor,
    interval: str,
) -> list[tuple[str, Callable[[], ChordDescriptor | None]]]:
    """Ordered seventh-chord constructions; the first non-None result wins."""

    def exact(chord: ChordDescriptor) -> Callable[[], ChordDescriptor | None]:
        def build() -> ChordDescriptor | None:
            quality = SEVENTH_CHORDS.get((chord.quality.triad, interval))
            return chord.with_quality(quality) if quality else None
        return build

    def nearest(chord: ChordDescriptor) -> Callable[[], ChordDescriptor | None]:
        def build() -> ChordDescriptor | None:
            quality = NEAREST_SEVENTH.get(chord.quality.triad)
            return chord.with_quality(quality) if quality else None
        return build

    return [
        ("requested seventh", exact(modified)),
        ("nearest standard seventh", nearest(modified)),
        ("requested seventh on diatonic chord", exact(diatonic)),
        ("nearest standard seventh on diatonic chord", nearest(diatonic)),
    ]


def apply_chord_modifications(
    current_chord_symbol: str,
    roman: str,
    key: KeyDescriptor | None,
    degree_index: int,
) -> str:
    """
    Apply chromatic, quality and seventh requests to a diatonic chord.

    Args:
        current_chord_symbol: The diatonic chord, e.g. "Dm".
        roman:                The Roman numeral with its inline quality, e.g. "iiø7".
        key:                  The key the numeral is read in.
        degree_index:         0-based scale degree of the numeral.

    Returns:
        The final chord symbol.

    Raises:
        InvalidInput: If ``key`` is missing.
        MusicTheoryError: On an out-of-range degree or an unparseable
            starting symbol or numeral.
    """
    if key is None:
        raise InvalidInput(f"Invalid key details provided for '{roman}'.")
    if not 0 <= degree_index <= 6:
        raise MusicTheoryError(f"Scale degree index {degree_index} is out of range 0-6.")

    diatonic = parse_chord_symbol(current_chord_symbol)
    parsed = parse_roman_numeral(roman)
    chord = diatonic

    if parsed.accidental:
        triad = ChordQuality.MAJOR if parsed.numeral.isupper() else ChordQuality.MINOR
        chord = ChordDescriptor(_alter_spelling(chord.root, _accidental_shift(parsed.accidental)), triad)
        diatonic = chord

    requested = QUALITY_TOKENS.get(parsed.quality)
    if parsed.suspension:
        requested = ChordQuality.SUSPENDED
    if requested is not None:
        chord = chord.with_quality(requested)

    interval = _seventh_interval(parsed, key, degree_index)
    if interval is None:
        return chord.symbol

    for position, (name, strategy) in enumerate(_seventh_strategies(chord, diatonic, interval)):
        result = strategy()
        if result is None:
            continue
        if position:
            logger.info("'%s' in %s: %s gives %s", roman, key.name, name, result.symbol)
        return result.symbol

    raise MusicTheoryError(f"Could not build a seventh chord for '{roman}' on {chord.symbol}.")


# ── Public API ──────────────────────────────────────────────────────────────

def tonicize(key: KeyDescriptor, target: str) -> KeyDescriptor:
    """
    Key built on a scale degree of ``key``, e.g. "IV" of C major -> F major.

    Upper-case targets yield a major key and lower-case targets a minor key.
    """
    match = SECONDARY_PATTERN.match(target)
    if not match:
        raise MusicTheoryError(f"Invalid secondary target '{target}'.")
    numeral = match.group("numeral")
    degree_index = ROMAN_DEGREES[numeral.upper()]
    root = parse_chord_symbol(diatonic_chord_symbol(degree_index, key, target)).root
    root = _alter_spelling(root, _accidental_shift(match.group("accidental")))
    return build_key(root, MAJOR if numeral.isupper() else MINOR)


def resolve_chord(roman_with_figures: str, key_name: str) -> ChordInfo:
    """
    Resolve a Roman numeral in a key to concrete notes.

    Args:
        roman_with_figures: e.g. "I", "V65/IV", "iiø7", "bVI6", "I/5".
        key_name:           e.g. "C", "Gm", "f# minor".

    Returns:
        ChordInfo with the final symbol, root-position MIDI notes, their
        spellings and the required bass pitch class.

    Raises:
        InvalidInput: If the key cannot be resolved.
        MusicTheoryError: If the numeral cannot be parsed or resolved.
    """
    parsed = parse_roman_numeral(roman_with_figures)
    home = resolve_key(key_name)
    key = tonicize(home, parsed.secondary) if parsed.secondary else home

    degree_index = parsed.degree_index
    symbol = diatonic_chord_symbol(degree_index, key, parsed.base_roman)
    symbol = apply_chord_modifications(symbol, roman_with_figures, key, degree_index)
    info = materialize_chord(symbol, parsed.bass_interval, home.mode, home.tonic)

    logger.debug(
        "Resolved %r in %s -> %s %s (bass pc %s)",
        roman_with_figures,
        home.name,
        info.final_chord_symbol,
        list(info.note_names),
        info.required_bass_pc,
    )
    return info
