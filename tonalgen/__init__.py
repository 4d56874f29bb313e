"""Music-theory resolution engine: keys, Roman numerals, chords, progressions and rhythms."""

from tonalgen.chord_symbols import ChordDescriptor, ChordQuality, parse_chord_symbol
from tonalgen.difficulty import GenerationSettings, GenerationStyle, map_difficulty_to_settings
from tonalgen.errors import GenerationError, InvalidInput, InvalidKey, InvalidMeter, MusicTheoryError, TonalGenError
from tonalgen.harmony import apply_chord_modifications, diatonic_chord_symbol, resolve_chord
from tonalgen.keys import KeyDescriptor, ScaleVariant, resolve_key
from tonalgen.meter import Meter, validate_meter
from tonalgen.progression import ProgressionGenerator, generate_progression
from tonalgen.rhythm import RhythmGenerator, generate_rhythm
from tonalgen.roman import ParsedRomanNumeral, parse_roman_numeral
from tonalgen.voicing import ChordInfo, extend_pool, is_in_range, materialize_chord, midi_to_note_name, put_in_range

__version__ = "0.1.0"

__all__ = [
    "ChordDescriptor",
    "ChordInfo",
    "ChordQuality",
    "GenerationError",
    "GenerationSettings",
    "GenerationStyle",
    "InvalidInput",
    "InvalidKey",
    "InvalidMeter",
    "KeyDescriptor",
    "Meter",
    "MusicTheoryError",
    "ParsedRomanNumeral",
    "ProgressionGenerator",
    "RhythmGenerator",
    "ScaleVariant",
    "TonalGenError",
    "apply_chord_modifications",
    "diatonic_chord_symbol",
    "extend_pool",
    "generate_progression",
    "generate_rhythm",
    "is_in_range",
    "map_difficulty_to_settings",
    "materialize_chord",
    "midi_to_note_name",
    "parse_chord_symbol",
    "parse_roman_numeral",
    "put_in_range",
    "resolve_chord",
    "resolve_key",
    "validate_meter",
]
