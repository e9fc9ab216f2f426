"""Write generated chorales to Standard MIDI Files.

Modification summary
--------------------
* ``create_midi_file`` writes one track per voice on its own channel so the
  parts can be muted or re-orchestrated independently in a sequencer.
* A leading conductor track carries tempo, time signature and, for standard
  key names, the key signature.
* Rests advance time on their track instead of emitting events, keeping every
  voice aligned beat for beat.
* ``create_midi_file`` creates the destination directory automatically and
  returns the in-memory ``MidiFile`` for inspection.
* ``mido`` is imported inside ``create_midi_file`` so the rest of the package
  loads without the MIDI dependency.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional, Union

if TYPE_CHECKING:
    from mido import MidiFile

from .models import Chorale
from .theory import STANDARD_KEYS

__all__ = ["create_midi_file", "TICKS_PER_BEAT", "VOICE_PROGRAMS"]

# Resolution of one quarter note.
TICKS_PER_BEAT = 480

DEFAULT_VELOCITY = 64

# Default General MIDI program per voice (0 = Acoustic Grand Piano).
VOICE_PROGRAMS: Dict[str, int] = {
    "soprano": 0,
    "alto": 0,
    "tenor": 0,
    "bass": 0,
}


def create_midi_file(
    chorale: Chorale,
    bpm: int,
    output_file: Union[str, Path],
    *,
    program: Optional[int] = None,
    velocity: int = DEFAULT_VELOCITY,
) -> "MidiFile":
    """Write ``chorale`` to ``output_file``.

    Parameters
    ----------
    chorale:
        Result of :func:`~chorale_generator.generation.generate_chorale`.
    bpm:
        Tempo in quarter-note beats per minute.
    output_file:
        Destination path. Missing parent directories are created.
    program:
        General MIDI program applied to every voice. ``None`` keeps
        :data:`VOICE_PROGRAMS`.
    velocity:
        Note-on velocity for every sounded beat.

    Returns
    -------
    MidiFile
        In-memory representation of the written file.

    Raises
    ------
    ValueError
        If ``bpm`` is not positive or ``program``/``velocity`` fall outside
        ``0-127``.
    """

    try:
        import mido
        from mido import Message, MetaMessage, MidiFile, MidiTrack
    except ModuleNotFoundError as exc:
        raise ImportError(
            "mido is required to create MIDI files; install it with 'pip install mido'"
        ) from exc

    if bpm <= 0:
        raise ValueError("bpm must be a positive integer")
    if program is not None and not 0 <= program <= 127:
        raise ValueError("program must be between 0 and 127")
    if not 0 <= velocity <= 127:
        raise ValueError("velocity must be between 0 and 127")

    numerator, denominator = chorale.meter
    beat_ticks = TICKS_PER_BEAT * 4 // denominator

    mid = MidiFile(type=1, ticks_per_beat=TICKS_PER_BEAT)
    conductor = MidiTrack()
    mid.tracks.append(conductor)
    conductor.append(MetaMessage("track_name", name="Conductor", time=0))
    conductor.append(MetaMessage("set_tempo", tempo=mido.bpm2tempo(bpm), time=0))
    conductor.append(
        MetaMessage("time_signature", numerator=numerator, denominator=denominator, time=0)
    )
    if chorale.key.name in STANDARD_KEYS:
        conductor.append(MetaMessage("key_signature", key=chorale.key.name, time=0))
    else:
        logging.info("Key %s has no standard key signature; omitting it.", chorale.key.name)

    for channel, (voice, events) in enumerate(chorale.voices):
        track = MidiTrack()
        mid.tracks.append(track)
        track.append(MetaMessage("track_name", name=voice.capitalize(), time=0))
        voice_program = VOICE_PROGRAMS[voice] if program is None else program
        track.append(Message("program_change", program=voice_program, channel=channel, time=0))

        pending = 0
        for event in events:
            if event.is_rest:
                pending += beat_ticks
                continue
            track.append(
                Message("note_on", note=event.pitch, velocity=velocity, channel=channel, time=pending)
            )
            track.append(
                Message("note_off", note=event.pitch, velocity=velocity, channel=channel, time=beat_ticks)
            )
            pending = 0
        # Trailing rests still count towards the length of the part.
        track.append(MetaMessage("end_of_track", time=pending))

    Path(output_file).expanduser().parent.mkdir(parents=True, exist_ok=True)

    mid.save(str(output_file))
    logging.info("MIDI file saved to %s", output_file)
    return mid
