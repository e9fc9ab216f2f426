"""Input validation helpers shared by the generator and the CLI.

Every function here fails fast with ``ValueError`` so invalid requests are
rejected before any measure is generated.

Usage Example
-------------
>>> from chorale_generator.utils import validate_time_signature
>>> validate_time_signature("3/4")
(3, 4)
>>> parse_progression("I, IV, V7, I")
['I', 'IV', 'V7', 'I']
"""

from __future__ import annotations

from typing import List, Tuple

from .chords import roman_degree

__all__ = [
    "SUPPORTED_BEAT_VALUES",
    "validate_time_signature",
    "validate_meter",
    "validate_measures",
    "parse_progression",
]

# Beat values with a duration symbol in the measure assembler.
SUPPORTED_BEAT_VALUES = (2, 4, 8, 16)


def validate_time_signature(ts: str) -> Tuple[int, int]:
    """Parse and validate a time signature string.

    Parameters
    ----------
    ts:
        Time signature in ``"NUM/DEN"`` form. Whitespace around the
        separator is ignored.

    Returns
    -------
    tuple[int, int]
        ``(beats_per_measure, beat_value)`` when ``ts`` is valid.

    Raises
    ------
    ValueError
        If ``ts`` is malformed or uses an unsupported beat value.
    """

    parts = ts.strip().split("/")
    if len(parts) != 2:
        raise ValueError("Time signature must be in the form 'beats/beat-value'.")

    try:
        numerator = int(parts[0])
        denominator = int(parts[1])
    except ValueError as exc:
        raise ValueError("Time signature must contain integer beats and beat value.") from exc

    return validate_meter((numerator, denominator))


def validate_meter(meter: Tuple[int, int]) -> Tuple[int, int]:
    """Check an already parsed ``(beats, beat_value)`` pair."""

    try:
        beats, beat_value = meter
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Meter must be a (beats, beat_value) pair, got {meter!r}") from exc

    if not isinstance(beats, int) or beats <= 0:
        raise ValueError(f"Beats per measure must be a positive integer, got {beats!r}")
    if beat_value not in SUPPORTED_BEAT_VALUES:
        raise ValueError(
            "Beat value must be one of "
            + ", ".join(str(v) for v in SUPPORTED_BEAT_VALUES)
            + f"; got {beat_value!r}"
        )
    return beats, beat_value


def validate_measures(num_measures: int) -> int:
    if isinstance(num_measures, bool) or not isinstance(num_measures, int) or num_measures <= 0:
        raise ValueError(f"Number of measures must be a positive integer, got {num_measures!r}")
    return num_measures


def parse_progression(text: str) -> List[str]:
    """Split a comma separated Roman-numeral progression.

    Each token must contain a recognisable numeral (``I`` to ``VII`` in either
    case); quality marks and figures such as ``°`` or ``7`` are kept as typed.

    Raises
    ------
    ValueError
        If the progression is empty or any token has no scale degree.
    """

    tokens = [t.strip() for t in text.split(",") if t.strip()]
    if not tokens:
        raise ValueError("Chord progression must contain at least one numeral.")
    for token in tokens:
        if roman_degree(token) is None:
            raise ValueError(f"Invalid Roman numeral in progression: {token}")
    return tokens
