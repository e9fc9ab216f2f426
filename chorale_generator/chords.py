"""Resolve Roman numerals to concrete chord pitches.

:func:`resolve_chord` turns a scale-degree label such as ``"V7"`` into a
:class:`~chorale_generator.models.Chord` whose pitches sit around middle C,
and :func:`expand_note_pool` spreads those pitches across several octaves so
each voice has candidates in its own register.

Resolution never raises for musical input.  When a numeral cannot be parsed
or the key yields no usable chord the returned ``Chord`` is empty and the
caller decides how to degrade (the generator rests for the whole measure).

Example
-------
>>> from chorale_generator.theory import get_key
>>> resolve_chord("V7", get_key("C")).pitches
(67, 71, 74, 77)
>>> expand_note_pool((60, 64, 67), octaves_below=0, octaves_above=1)
(60, 64, 67, 72, 76, 79)
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Tuple

from . import DEFAULT_OCTAVE
from .models import Chord, Key
from .theory import chord_info, diatonic_triads, interval_semitones, note_midi

# Fixed mapping from the base numeral (upper case) to a zero-based scale degree.
ROMAN_DEGREES = {"I": 0, "II": 1, "III": 2, "IV": 3, "V": 4, "VI": 5, "VII": 6}

# Roots spelled with these letters are anchored an octave lower so chords built
# on A or B do not start near the top of the middle octave.
_LOW_ANCHOR_LETTERS = {"A", "B"}

_NUMERAL_RE = re.compile(r"([iv]+)", re.IGNORECASE)


def roman_degree(roman: str) -> Optional[int]:
    """Return the 0-6 scale degree of ``roman`` or ``None`` if unparseable.

    Only the first run of ``i``/``v`` letters is considered so quality marks
    and figures (``"vii°"``, ``"V7"``) are ignored.
    """

    match = _NUMERAL_RE.search(roman)
    if not match:
        return None
    return ROMAN_DEGREES.get(match.group(1).upper())


def _anchor_octave(tonic: str) -> int:
    return DEFAULT_OCTAVE - 1 if tonic[0] in _LOW_ANCHOR_LETTERS else DEFAULT_OCTAVE


def resolve_chord(roman: str, key: Key) -> Chord:
    """Return the chord for ``roman`` in ``key``.

    A seventh is requested by a ``"7"`` anywhere in the numeral.  If the
    diatonic triad has no valid seventh form the triad is kept.  Any failure
    along the way yields a chord with no pitches.
    """

    degree = roman_degree(roman)
    if degree is None:
        logging.warning("Could not map Roman numeral %r to a scale degree in %s.", roman, key.name)
        return Chord(roman)

    triads = diatonic_triads(key)
    if degree >= len(triads):
        logging.warning("Scale degree %d out of bounds for key %s.", degree, key.name)
        return Chord(roman)
    symbol = triads[degree]

    if "7" in roman and "7" not in symbol:
        seventh_symbol = symbol + "7"
        if not chord_info(seventh_symbol).empty:
            symbol = seventh_symbol
        else:
            logging.warning(
                "%r requested a seventh but %r is not a valid chord; using %r.",
                roman,
                seventh_symbol,
                symbol,
            )

    info = chord_info(symbol)
    if info.empty:
        logging.warning("No chord notes for %r (from %r) in %s.", symbol, roman, key.name)
        return Chord(roman, symbol)

    root_midi = note_midi(f"{info.tonic}{_anchor_octave(info.tonic)}")
    if root_midi is None:
        logging.warning("Could not determine a root pitch for %r.", symbol)
        return Chord(roman, symbol)

    pitches = []
    for interval in info.intervals:
        semitones = interval_semitones(interval)
        if semitones is None:
            logging.warning("Could not transpose %r by %r; dropping it.", info.tonic, interval)
            continue
        pitches.append(root_midi + semitones)

    seventh = any(interval.startswith("7") for interval in info.intervals)
    return Chord(roman, symbol, info.root, tuple(pitches), seventh)


def expand_note_pool(
    pitches: Iterable[int],
    octaves_below: int = 2,
    octaves_above: int = 3,
) -> Tuple[int, ...]:
    """Return ``pitches`` copied into neighbouring octaves, sorted and unique."""

    pool = set()
    for pitch in pitches:
        for offset in range(-octaves_below, octaves_above + 1):
            pool.add(pitch + offset * 12)
    return tuple(sorted(pool))
