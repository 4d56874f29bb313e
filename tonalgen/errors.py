"""Exception hierarchy shared by every tonalgen component."""


class TonalGenError(Exception):
    """Base class for all errors raised by the engine."""


class InvalidInput(TonalGenError):
    """
    Malformed or out-of-contract caller input.

    Raised for unparseable key or meter strings, a missing KeyDescriptor,
    and out-of-range complexity values or scale-degree indices.
    """


class InvalidKey(InvalidInput):
    """A key name could not be parsed into a canonical tonic and mode."""


class InvalidMeter(InvalidInput):
    """A time-signature string is malformed or not a supported meter."""


class MusicTheoryError(TonalGenError):
    """
    Syntactically acceptable input that does not resolve to a musical construct.

    Examples: an unparseable Roman numeral, an out-of-range diatonic degree,
    a chord symbol that yields no notes, an unresolvable bass interval.
    """


class GenerationError(TonalGenError):
    """An internal invariant of a generative algorithm was violated."""
