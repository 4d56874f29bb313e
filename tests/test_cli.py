"""CLI tests driven through click's CliRunner."""

import logging

import pytest
from click.testing import CliRunner

from tonalgen import __version__
from tonalgen.cli import main
from tonalgen.logger_config import LOGGER_NAME


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


def _run(*args: str):
    return CliRunner().invoke(main, list(args))


def test_version() -> None:
    result = _run("--version")
    assert result.exit_code == 0
    assert __version__ in result.output


def test_key_command() -> None:
    result = _run("key", "Am")
    assert result.exit_code == 0
    assert "Tonic  : A" in result.output
    assert "G#dim" in result.output


def test_key_command_invalid() -> None:
    result = _run("key", "H")
    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_chord_command() -> None:
    result = _run("chord", "V65/IV", "--key", "C")
    assert result.exit_code == 0
    assert "Chord  : C7" in result.output
    assert "Bass   : 4" in result.output


def test_chord_command_bad_numeral() -> None:
    result = _run("chord", "XYZ")
    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_pool_command() -> None:
    result = _run("pool", "60", "64", "67")
    assert result.exit_code == 0
    values = [int(v) for v in result.output.split()]
    assert values[0] == 24 and values[-1] == 108


def test_pool_command_names() -> None:
    result = _run("pool", "--names", "69")
    assert result.output.split()[0] == "A0"


def test_progression_command() -> None:
    result = _run("progression", "--key", "C", "--measures", "6", "--complexity", "5", "--seed", "3")
    assert result.exit_code == 0
    numerals = result.output.strip().split(" | ")
    assert len(numerals) == 6
    assert numerals[0] == numerals[-1] == "I"
    assert numerals[-2] == "V7"


def test_progression_command_resolves_symbols() -> None:
    result = _run("progression", "-k", "Am", "-m", "3", "-c", "0", "--resolve", "--seed", "1")
    lines = result.output.strip().splitlines()
    assert lines == ["i | V | i", "Am | EM | Am"]


def test_progression_command_rejects_complexity() -> None:
    result = _run("progression", "--complexity", "11")
    assert result.exit_code == 2


def test_rhythm_command() -> None:
    result = _run("rhythm", "--meter", "6/8", "-c", "7", "-m", "3", "--seed", "1")
    assert result.exit_code == 0
    assert len(result.output.strip().splitlines()) == 3


def test_rhythm_command_bad_meter() -> None:
    result = _run("rhythm", "--meter", "13/8")
    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_verbose_flag_logs_debug(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="tonalgen")
    result = _run("--verbose", "chord", "I")
    assert result.exit_code == 0
    assert any("Resolved" in record.getMessage() for record in caplog.records)
