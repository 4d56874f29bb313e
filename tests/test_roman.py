"""Unit tests for Roman numeral parsing."""

import pytest

from tonalgen.errors import MusicTheoryError
from tonalgen.roman import parse_roman_numeral


@pytest.mark.parametrize(
    ("text", "base", "bass"),
    [
        ("I", "I", "1"),
        ("V7", "V7", "1"),
        ("I6", "I", "3"),
        ("I64", "I", "5"),
        ("V65", "V", "3"),
        ("V43", "V", "5"),
        ("V42", "V", "7"),
        ("V2", "V", "7"),
        ("iiø765", "iiø7", "3"),
        ("bVI6", "bVI", "3"),
        ("I/5", "I", "5"),
        ("I/b3", "I", "b3"),
        ("  vii°7 ", "vii°7", "1"),
    ],
)
def test_parse_roman_numeral_bass(text: str, base: str, bass: str) -> None:
    parsed = parse_roman_numeral(text)
    assert parsed.base_roman == base
    assert parsed.bass_interval == bass


def test_slash_interval_is_taken_verbatim() -> None:
    parsed = parse_roman_numeral("I/x9")
    assert parsed.bass_interval == "x9"
    assert parsed.secondary is None


def test_secondary_relation_keeps_figure() -> None:
    parsed = parse_roman_numeral("V65/IV")
    assert parsed.base_roman == "V"
    assert parsed.figure == "65"
    assert parsed.bass_interval == "3"
    assert parsed.secondary == "IV"


def test_secondary_relation_lowercase_target() -> None:
    parsed = parse_roman_numeral("vii°7/ii")
    assert parsed.base_roman == "vii°7"
    assert parsed.secondary == "ii"
    assert parsed.is_root_position


def test_parts_of_base_numeral() -> None:
    parsed = parse_roman_numeral("bVII7")
    assert parsed.accidental == "b"
    assert parsed.numeral == "VII"
    assert parsed.degree_index == 6
    assert parsed.wants_seventh


def test_quality_and_suspension() -> None:
    assert parse_roman_numeral("iiø7").quality == "ø"
    assert parse_roman_numeral("Imaj7").quality == "maj"
    assert parse_roman_numeral("V7sus").suspension == "sus"


@pytest.mark.parametrize(("text", "wants"), [("V65", True), ("V43", True), ("V6", False), ("V", False), ("V7", True)])
def test_seventh_figures_imply_seventh(text: str, wants: bool) -> None:
    assert parse_roman_numeral(text).wants_seventh is wants


@pytest.mark.parametrize("text", ["", "   ", "XYZ", "VIII", "/5", "I/", "Vx", "#", "7"])
def test_parse_roman_numeral_rejects(text: str) -> None:
    with pytest.raises(MusicTheoryError):
        parse_roman_numeral(text)
