"""tonalgen CLI entry point."""

import sys
from typing import NoReturn

import click

from tonalgen import __version__
from tonalgen.errors import TonalGenError
from tonalgen.harmony import resolve_chord
from tonalgen.keys import resolve_key
from tonalgen.logger_config import configure_logging
from tonalgen.progression import MAX_HARMONIC_COMPLEXITY, MIN_HARMONIC_COMPLEXITY, ProgressionGenerator
from tonalgen.rhythm import MAX_RHYTHMIC_COMPLEXITY, MIN_RHYTHMIC_COMPLEXITY, RhythmGenerator
from tonalgen.voicing import extend_pool, midi_to_note_name

MAX_MEASURES = 256


def _fail(exc: Exception) -> NoReturn:
    click.echo(f"  ERROR: {exc}", err=True)
    sys.exit(1)


def _format_event(event: int) -> str:
    """Render a signed denominator: 4 -> "4", -8 -> "r8"."""
    return f"r{-event}" if event < 0 else str(event)


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="tonalgen")
@click.option("--verbose", "-v", is_flag=True, help="Log resolution and generation details to stderr.")
def main(verbose: bool) -> None:
    """tonalgen: keys, Roman numerals, progressions and rhythms."""
    configure_logging(verbose)


# ── key subcommand ─────────────────────────────────────────────────────────────

@main.command()
@click.argument("name")
def key(name: str) -> None:
    """
    Show the scale and diatonic chords of a key.

    \b
    Examples:
      tonalgen key C
      tonalgen key "f# minor"
    """
    try:
        descriptor = resolve_key(name)
    except TonalGenError as exc:
        _fail(exc)

    click.echo(f"  Tonic  : {descriptor.tonic}")
    click.echo(f"  Mode   : {descriptor.mode}")
    click.echo(f"  Scale  : {' '.join(descriptor.scale)}")
    click.echo(f"  Chords : {' '.join(descriptor.chords)}")
    for label, variant in (
        ("Natural", descriptor.natural),
        ("Harmonic", descriptor.harmonic),
        ("Melodic", descriptor.melodic),
    ):
        if variant is not None:
            click.echo(f"  {label:<9}: {' '.join(variant.scale)}  |  {' '.join(variant.chords)}")


# ── chord subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("roman")
@click.option("--key", "-k", "key_name", default="C", show_default=True, help="Key to read the numeral in.")
def chord(roman: str, key_name: str) -> None:
    """
    Resolve a Roman numeral to notes.

    \b
    Examples:
      tonalgen chord V65/IV --key C
      tonalgen chord "vii°7" -k G
    """
    try:
        info = resolve_chord(roman, key_name)
    except TonalGenError as exc:
        _fail(exc)

    bass = "root position" if info.required_bass_pc is None else str(info.required_bass_pc)
    click.echo(f"  Chord  : {info.final_chord_symbol}")
    click.echo(f"  Notes  : {' '.join(str(n) for n in info.notes)}")
    click.echo(f"  Names  : {' '.join(info.note_names)}")
    click.echo(f"  Bass   : {bass}")


# ── pool subcommand ────────────────────────────────────────────────────────────

@main.command()
@click.argument("notes", nargs=-1, type=click.IntRange(0, 127))
@click.option("--names", is_flag=True, help="Print note names instead of MIDI numbers.")
def pool(notes: tuple[int, ...], names: bool) -> None:
    """
    List every piano key sharing a pitch class with NOTES.

    \b
    Examples:
      tonalgen pool 60 64 67
    """
    extended = extend_pool(list(notes))
    rendered = [midi_to_note_name(n) if names else str(n) for n in extended]
    click.echo(" ".join(rendered))


# ── progression subcommand ─────────────────────────────────────────────────────

@main.command()
@click.option("--key", "-k", "key_name", default="C", show_default=True, help="Key name, e.g. C or Gm.")
@click.option("--measures", "-m", type=click.IntRange(0, MAX_MEASURES), default=8, show_default=True)
@click.option(
    "--complexity",
    "-c",
    type=click.IntRange(MIN_HARMONIC_COMPLEXITY, MAX_HARMONIC_COMPLEXITY),
    default=3,
    show_default=True,
    help="Harmonic complexity; higher values add sevenths and colour chords.",
)
@click.option("--seed", type=int, default=None, help="Seed for reproducible output.")
@click.option("--resolve", is_flag=True, help="Also print the chord symbol of each numeral.")
def progression(key_name: str, measures: int, complexity: int, seed: int | None, resolve: bool) -> None:
    """
    Generate a chord progression ending in a cadence.

    \b
    Examples:
      tonalgen progression --key Gm --measures 8 --complexity 6 --seed 7
    """
    try:
        numerals = ProgressionGenerator(rng=seed).generate(key_name, measures, complexity)
        symbols = [resolve_chord(n, key_name).final_chord_symbol for n in numerals] if resolve else []
    except TonalGenError as exc:
        _fail(exc)

    click.echo(" | ".join(numerals))
    if symbols:
        click.echo(" | ".join(symbols))


# ── rhythm subcommand ──────────────────────────────────────────────────────────

@main.command()
@click.option("--meter", default="4/4", show_default=True, help="Time signature, e.g. 4/4 or 6/8.")
@click.option(
    "--complexity",
    "-c",
    type=click.IntRange(MIN_RHYTHMIC_COMPLEXITY, MAX_RHYTHMIC_COMPLEXITY),
    default=3,
    show_default=True,
)
@click.option("--measures", "-m", type=click.IntRange(1, MAX_MEASURES), default=1, show_default=True)
@click.option("--seed", type=int, default=None, help="Seed for reproducible output.")
def rhythm(meter: str, complexity: int, measures: int, seed: int | None) -> None:
    """
    Generate measures of rhythm as note denominators (rests prefixed with r).

    \b
    Examples:
      tonalgen rhythm --meter 6/8 -c 7 -m 4 --seed 1
    """
    try:
        bars = RhythmGenerator(rng=seed).generate_measures(meter, complexity, measures)
    except TonalGenError as exc:
        _fail(exc)

    for bar in bars:
        click.echo(" ".join(_format_event(e) for e in bar))
