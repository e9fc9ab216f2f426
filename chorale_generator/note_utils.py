"""Utility functions for translating between note names and MIDI numbers.

The generator works on raw MIDI integers internally.  These helpers exist for
the human-facing edges: log messages, the command line printout and tests that
are easier to read with ``"C4"`` than ``60``.

Example
-------
>>> from chorale_generator.note_utils import note_to_midi, midi_to_note
>>> note_to_midi("C4")
60
>>> midi_to_note(63, prefer_flats=True)
'Eb4'
"""

# Modification Summary
# ---------------------
# * ``note_to_midi`` delegates parsing to :func:`chorale_generator.theory.note_midi`
#   and converts its ``None`` result into a descriptive ``ValueError``.
# * ``midi_to_note`` accepts ``prefer_flats`` so flat keys print as ``Bb``
#   rather than ``A#``.
# * Added ``format_voicing`` for compact per-measure log lines.

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from .models import Key, Voicing
from .theory import note_midi
from . import VOICE_ORDER

__all__ = ["note_to_midi", "midi_to_note", "format_voicing"]

SHARP_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
FLAT_NAMES = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]


@lru_cache(maxsize=None)
def note_to_midi(note: str) -> int:
    """Convert a note string such as ``C#4`` into a MIDI number.

    Raises
    ------
    ValueError
        If ``note`` is malformed or falls outside the ``0-127`` MIDI range.
    """

    midi = note_midi(note)
    if midi is None:
        logging.error("Invalid note: %s", note)
        raise ValueError(f"Invalid note: {note}")
    return midi


def midi_to_note(midi_note: int, *, prefer_flats: bool = False) -> str:
    """Convert a MIDI number into a note name such as ``C4``.

    Raises
    ------
    ValueError
        If ``midi_note`` is outside the inclusive ``0-127`` range.
    """

    if not 0 <= midi_note <= 127:
        raise ValueError(f"MIDI note {midi_note} out of range 0-127")

    # MIDI octave numbers are offset by one from scientific pitch notation.
    octave = midi_note // 12 - 1
    names = FLAT_NAMES if prefer_flats else SHARP_NAMES
    return f"{names[midi_note % 12]}{octave}"


def format_voicing(voicing: Voicing, key: Optional[Key] = None) -> str:
    """Return ``"S:E5 A:C5 T:G4 B:C3"`` style text; rests show as ``-``."""

    prefer_flats = key is not None and key.alteration < 0
    parts = []
    for voice in VOICE_ORDER:
        pitch = voicing[voice]
        name = "-" if pitch is None else midi_to_note(pitch, prefer_flats=prefer_flats)
        parts.append(f"{voice[0].upper()}:{name}")
    return " ".join(parts)
