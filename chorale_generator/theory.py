"""Diatonic theory lookups used by the chorale engine.

The module answers the handful of music-theory questions the generator needs:
what mode and signature a key has, which triads belong to it, what a chord
symbol contains and which pitch classes make up a named scale.  Everything is
derived from small lookup tables so the functions are pure and safe to call
from concurrent generation runs.

Chord symbols follow the usual lead-sheet spelling (``"C"``, ``"Dm"``,
``"Bdim"``, ``"G7"``).  Intervals are named with the number first and the
quality second (``"1P"``, ``"3M"``, ``"5d"``, ``"7m"``).

Example
-------
>>> diatonic_triads(get_key("C"))
['C', 'Dm', 'Em', 'F', 'G', 'Am', 'Bdim']
>>> chord_info("G7").intervals
('1P', '3M', '5P', '7m')
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from .models import Key

LETTERS = "CDEFGAB"

LETTER_SEMITONES: Dict[str, int] = {
    "C": 0,
    "D": 2,
    "E": 4,
    "F": 5,
    "G": 7,
    "A": 9,
    "B": 11,
}

# Position of each natural letter on the circle of fifths relative to C.
# Used to count the sharps or flats of a key signature.
_LETTER_FIFTHS: Dict[str, int] = {
    "F": -1,
    "C": 0,
    "G": 1,
    "D": 2,
    "A": 3,
    "E": 4,
    "B": 5,
}

# Semitone offsets from the tonic for the scales the engine understands.
SCALE_PATTERNS: Dict[str, Tuple[int, ...]] = {
    "major": (0, 2, 4, 5, 7, 9, 11),
    "minor": (0, 2, 3, 5, 7, 8, 10),
    "natural minor": (0, 2, 3, 5, 7, 8, 10),
    "aeolian": (0, 2, 3, 5, 7, 8, 10),
    "harmonic minor": (0, 2, 3, 5, 7, 8, 11),
    "melodic minor": (0, 2, 3, 5, 7, 9, 11),
}

# Triad quality per scale degree.  Minor keys follow common-practice usage:
# natural-minor triads except for a major dominant and a diminished
# leading-tone chord built on the raised seventh.
_MAJOR_QUALITIES = ("", "m", "m", "", "", "m", "dim")
_MINOR_QUALITIES = ("m", "dim", "", "m", "", "", "dim")

# Chord quality suffix -> interval names.  Several spellings share a quality.
CHORD_INTERVALS: Dict[str, Tuple[str, ...]] = {
    "": ("1P", "3M", "5P"),
    "M": ("1P", "3M", "5P"),
    "maj": ("1P", "3M", "5P"),
    "m": ("1P", "3m", "5P"),
    "min": ("1P", "3m", "5P"),
    "dim": ("1P", "3m", "5d"),
    "°": ("1P", "3m", "5d"),
    "aug": ("1P", "3M", "5A"),
    "+": ("1P", "3M", "5A"),
    "sus2": ("1P", "2M", "5P"),
    "sus4": ("1P", "4P", "5P"),
    "7": ("1P", "3M", "5P", "7m"),
    "maj7": ("1P", "3M", "5P", "7M"),
    "M7": ("1P", "3M", "5P", "7M"),
    "m7": ("1P", "3m", "5P", "7m"),
    "dim7": ("1P", "3m", "5d", "7d"),
    "°7": ("1P", "3m", "5d", "7d"),
    "m7b5": ("1P", "3m", "5d", "7m"),
    "ø": ("1P", "3m", "5d", "7m"),
    "ø7": ("1P", "3m", "5d", "7m"),
}

# Semitone size of the major or perfect form of each simple interval number.
_INTERVAL_BASE: Dict[int, int] = {1: 0, 2: 2, 3: 4, 4: 5, 5: 7, 6: 9, 7: 11}
_PERFECT_NUMBERS = {1, 4, 5}

# Standard key names with at most seven sharps or flats, as written in MIDI
# key signature meta messages.
STANDARD_KEYS: Tuple[str, ...] = (
    "Cb", "Gb", "Db", "Ab", "Eb", "Bb", "F", "C", "G", "D", "A", "E", "B", "F#", "C#",
    "Abm", "Ebm", "Bbm", "Fm", "Cm", "Gm", "Dm", "Am", "Em", "Bm", "F#m", "C#m",
    "G#m", "D#m", "A#m",
)

# The accidental group is optional so a chord quality never absorbs a flat
# sign: "Bb" is B-flat, not B with quality "b".
_NOTE_RE = re.compile(r"^([A-Ga-g])(#{1,2}|b{1,2})?$")
_NOTE_OCTAVE_RE = re.compile(r"^([A-Ga-g])(#{1,2}|b{1,2})?(-?\d+)$")
_CHORD_RE = re.compile(r"^([A-Ga-g])(#{1,2}|b{1,2})?(.*)$")
# Key tonics take at most one accidental; double-accidental keys would need
# triple accidentals in their scales.
_KEY_RE = re.compile(r"^([A-Ga-g])([#b])?$")
_INTERVAL_RE = re.compile(r"^(\d+)([PMmdA])$")


@dataclass(frozen=True)
class ChordInfo:
    """Description of a chord symbol.  ``empty`` marks an unknown symbol."""

    symbol: str
    tonic: str
    root: Optional[int]
    intervals: Tuple[str, ...]
    empty: bool = False


def _accidental_offset(accidentals: Optional[str]) -> int:
    if not accidentals:
        return 0
    return accidentals.count("#") - accidentals.count("b")


def note_pitch_class(name: str) -> Optional[int]:
    """Return the pitch class of a note name such as ``"Eb"``.

    ``None`` is returned for malformed names.
    """

    match = _NOTE_RE.match(name.strip())
    if not match:
        return None
    letter, accidentals = match.groups()
    return (LETTER_SEMITONES[letter.upper()] + _accidental_offset(accidentals)) % 12


def note_midi(name: str) -> Optional[int]:
    """Return the MIDI number for ``name`` (``"C4"`` -> ``60``) or ``None``."""

    match = _NOTE_OCTAVE_RE.match(name.strip())
    if not match:
        return None
    letter, accidentals, octave = match.groups()
    midi = (int(octave) + 1) * 12 + LETTER_SEMITONES[letter.upper()] + _accidental_offset(accidentals)
    if not 0 <= midi <= 127:
        return None
    return midi


def interval_semitones(name: str) -> Optional[int]:
    """Return the size of an interval name such as ``"5P"`` in semitones.

    Compound intervals (``"9M"``) are supported.  Malformed names or
    impossible qualities (``"5M"``, ``"3P"``) give ``None``.
    """

    match = _INTERVAL_RE.match(name)
    if not match:
        return None
    number = int(match.group(1))
    quality = match.group(2)
    if number < 1:
        return None
    octaves, simple = divmod(number - 1, 7)
    simple += 1
    base = _INTERVAL_BASE[simple] + 12 * octaves
    if simple in _PERFECT_NUMBERS:
        offsets = {"P": 0, "d": -1, "A": 1}
    else:
        offsets = {"M": 0, "m": -1, "d": -2, "A": 1}
    if quality not in offsets:
        return None
    return base + offsets[quality]


def _normalise_tonic(letter: str, accidentals: Optional[str]) -> str:
    return letter.upper() + (accidentals or "")


@lru_cache(maxsize=None)
def get_key(name: str) -> Key:
    """Resolve a key name such as ``"C"``, ``"f#m"`` or ``"Bb minor"``.

    Raises
    ------
    ValueError
        If ``name`` does not describe a major or minor key.
    """

    text = name.strip()
    mode = "major"
    lowered = text.lower()
    for word, word_mode in ((" major", "major"), (" minor", "minor")):
        if lowered.endswith(word):
            text = text[: -len(word)].strip()
            mode = word_mode
            break
    else:
        # A trailing ``m`` marks a minor key unless it is the whole string.
        if len(text) > 1 and text.endswith("m"):
            text = text[:-1]
            mode = "minor"

    match = _KEY_RE.match(text)
    if not match:
        raise ValueError(f"Unknown key: {name}")
    letter, accidentals = match.groups()
    tonic = _normalise_tonic(letter, accidentals)
    root = note_pitch_class(tonic)

    fifths = _LETTER_FIFTHS[tonic[0]] + 7 * _accidental_offset(accidentals)
    if mode == "minor":
        # The relative major sits a minor third above and shares the signature.
        fifths -= 3
    return Key(tonic=tonic, root=root, mode=mode, alteration=fifths)


def _spell_scale(tonic: str, pattern: Tuple[int, ...]) -> List[str]:
    """Spell a seven-note ``pattern`` from ``tonic`` using consecutive letters."""

    start = LETTERS.index(tonic[0])
    base = note_pitch_class(tonic)
    names = []
    for degree, offset in enumerate(pattern):
        letter = LETTERS[(start + degree) % 7]
        diff = (base + offset - LETTER_SEMITONES[letter]) % 12
        if diff > 6:
            diff -= 12
        names.append(letter + ("#" * diff if diff > 0 else "b" * -diff))
    return names


def diatonic_triads(key: Key) -> List[str]:
    """Return the seven triad symbols of ``key`` ordered by scale degree."""

    if key.is_minor:
        notes = _spell_scale(key.tonic, SCALE_PATTERNS["harmonic minor"])
        qualities = _MINOR_QUALITIES
    else:
        notes = _spell_scale(key.tonic, SCALE_PATTERNS["major"])
        qualities = _MAJOR_QUALITIES
    return [note + quality for note, quality in zip(notes, qualities)]


@lru_cache(maxsize=None)
def chord_info(symbol: str) -> ChordInfo:
    """Describe ``symbol``; unknown symbols return ``empty=True``."""

    match = _CHORD_RE.match(symbol.strip())
    if not match:
        return ChordInfo(symbol, "", None, (), empty=True)
    letter, accidentals, quality = match.groups()
    intervals = CHORD_INTERVALS.get(quality)
    if intervals is None:
        return ChordInfo(symbol, "", None, (), empty=True)
    tonic = _normalise_tonic(letter, accidentals)
    return ChordInfo(symbol, tonic, note_pitch_class(tonic), intervals)


def scale_pitch_classes(name: str) -> List[int]:
    """Return the pitch classes of a scale such as ``"A harmonic minor"``.

    Unknown scale names produce an empty list.
    """

    tonic, _, scale_type = name.strip().partition(" ")
    pattern = SCALE_PATTERNS.get(scale_type.strip().lower())
    root = note_pitch_class(tonic)
    if pattern is None or root is None:
        return []
    return [(root + offset) % 12 for offset in pattern]


def leading_tone(key: Key) -> int:
    """Pitch class a semitone below the tonic, raised in minor keys."""

    scale = "harmonic minor" if key.is_minor else "major"
    return scale_pitch_classes(f"{key.tonic} {scale}")[6]
