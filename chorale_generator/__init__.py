#!/usr/bin/env python3
"""Chorale Generator library.

This package realises four-part (soprano, alto, tenor, bass) chorales from a
handful of musical inputs.  A typical workflow is to call
:func:`generate_chorale` with a key, meter and number of measures, then feed
the returned :class:`Chorale` into :func:`create_midi_file` to produce a MIDI
file with one track per voice.

Underlying Algorithm
--------------------
Generation happens in two passes.  First a Roman-numeral progression is drawn
from a tiered chord vocabulary whose size follows the *harmonic complexity*
slider.  Interior chords follow simple functional tendencies (predominant to
dominant, dominant to tonic) and the phrase always closes with an authentic
cadence.  Second, each measure's chord is resolved to concrete pitches and a
voicing is chosen greedily: bass first, then soprano, then the alto and tenor
which must fit between them.  Every choice goes through the same scoring
primitive, :func:`find_closest_note`, which trades distance to a target pitch
against the size of the melodic motion from the previous measure.

Algorithm Pseudocode
--------------------
The following outlines the main loop executed by :class:`ChoraleGenerator`::

    progression = generate_chord_progression(key, measures, complexity)
    previous = Voicing.empty()
    for roman in progression:
        chord = resolve_chord(roman, key)
        if chord.is_empty:
            emit_rests(); previous = Voicing.empty(); continue
        pool = expand_note_pool(chord.pitches)
        voicing = assign(bass, soprano, alto, tenor)
        check_voice_leading(voicing, previous)
        emit_beats(voicing)
        previous = voicing

Voice-leading problems (parallel fifths, crossing, wide spacing) are logged
rather than repaired; the engine is a single-pass heuristic, not a solver.

Features include:
- Tiered chord vocabulary driven by a harmonic complexity slider.
- Smoothness-weighted pitch selection with leap correction.
- Seeded, injectable randomness for reproducible output.
- Advisory voice-leading checks gated by a strictness slider.
- MIDI export with one track per voice and a small command line interface.
"""

__version__ = "0.1.0"

# ---------------------------------------------------------------
# Modification Summary
# ---------------------------------------------------------------
# * Voice ranges and spacing limits live here as package constants so the
#   assignment engine, validator and tests agree on a single source.
# * Randomness is threaded through ``random.Random`` instances instead of the
#   module-level generator so concurrent runs and tests cannot interfere.
# * The voicing carried between measures is an immutable ``Voicing`` value
#   returned from each step rather than shared mutable state.
# * Chord resolution failures degrade a single measure to rests and reset the
#   carried voicing; generation always continues.
# * Settings persistence moved to :mod:`chorale_generator.settings`; the file
#   location honours the ``CHORALE_SETTINGS_FILE`` environment variable.
# ---------------------------------------------------------------

from typing import Dict, Tuple

# Order in which voices are stored, displayed and written to MIDI tracks.
VOICE_ORDER: Tuple[str, ...] = ("soprano", "alto", "tenor", "bass")

# Typical SATB ranges as inclusive MIDI numbers.
# C4=60, A5=81 | G3=55, E5=76 | C3=48, G4=67 | E2=40, C4=60
VOICE_RANGES: Dict[str, Tuple[int, int]] = {
    "soprano": (60, 81),
    "alto": (55, 76),
    "tenor": (48, 67),
    "bass": (40, 60),
}

# Maximum distance in semitones between adjacent voices.
# P8 = 12 semitones | P12 = 19 semitones
VOICE_SPACING_LIMIT: Dict[str, int] = {
    "soprano_alto": 12,
    "alto_tenor": 12,
    "tenor_bass": 19,
}

# Octave used to anchor chord roots before they are spread into a note pool.
DEFAULT_OCTAVE = 4

from .models import (  # noqa: E402
    Chord,
    Chorale,
    GenerationSettings,
    Key,
    NoteEvent,
    VoiceLeadingIssue,
    VoicesData,
    Voicing,
)
from .theory import get_key, diatonic_triads, chord_info, scale_pitch_classes  # noqa: E402,F401
from .note_utils import note_to_midi, midi_to_note  # noqa: E402,F401
from .chords import resolve_chord, expand_note_pool  # noqa: E402,F401
from .voice_leading import find_closest_note, parallel_motion  # noqa: E402,F401
from .harmony_generator import HarmonyGenerator, generate_chord_progression  # noqa: E402,F401
from .polyphony import VoiceAssigner  # noqa: E402,F401
from .validation import check_voice_leading  # noqa: E402,F401
from .generation import ChoraleGenerator, assemble_measure, generate_chorale  # noqa: E402,F401
from .settings import load_settings, save_settings, DEFAULT_SETTINGS_FILE  # noqa: E402,F401
from .midi_io import create_midi_file  # noqa: E402,F401

__all__ = [
    "VOICE_ORDER",
    "VOICE_RANGES",
    "VOICE_SPACING_LIMIT",
    "DEFAULT_OCTAVE",
    "Chord",
    "Chorale",
    "GenerationSettings",
    "Key",
    "NoteEvent",
    "VoiceLeadingIssue",
    "VoicesData",
    "Voicing",
    "ChoraleGenerator",
    "HarmonyGenerator",
    "VoiceAssigner",
    "generate_chorale",
    "generate_chord_progression",
    "resolve_chord",
    "expand_note_pool",
    "find_closest_note",
    "check_voice_leading",
    "create_midi_file",
    "run_cli",
    "main",
]


def run_cli():
    from .cli import run_cli as _run_cli
    _run_cli()


def main():
    from .cli import main as _main
    _main()


if __name__ == "__main__":
    main()
