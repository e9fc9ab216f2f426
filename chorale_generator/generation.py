"""Generation driver: from inputs to a complete four-voice chorale.

The driver validates the request, draws a progression and then walks the
measures in order.  Each measure resolves its chord, voices it against the
previous measure's voicing, optionally validates the result and expands it into
one event per beat.  The voicing returned by :func:`assemble_measure` is the
only state carried to the next measure.

Example
-------
>>> import random
>>> chorale = generate_chorale("C", "4/4", 4, rng=random.Random(3))
>>> len(chorale.voices) == 16
True
"""

# Modification Summary
# ---------------------
# * A chord that cannot be resolved rests for one measure in every voice and
#   resets the carried voicing; the run continues with the next measure.
# * Validation findings are collected on the returned ``Chorale`` as well as
#   logged, so callers can inspect them without parsing log output.
# * ``generate`` accepts an explicit progression to voice a user supplied
#   sequence of numerals instead of a generated one.

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Sequence, Tuple, Union

from . import VOICE_ORDER
from .chords import expand_note_pool, resolve_chord
from .harmony_generator import HarmonyGenerator
from .models import (
    Chorale,
    GenerationSettings,
    Key,
    NoteEvent,
    VoiceLeadingIssue,
    VoicesData,
    Voicing,
)
from .note_utils import format_voicing
from .polyphony import VoiceAssigner
from .theory import get_key, leading_tone
from .utils import validate_measures, validate_meter, validate_time_signature
from .validation import check_voice_leading

__all__ = [
    "BEAT_DURATIONS",
    "VALIDATION_STRICTNESS",
    "duration_symbol",
    "assemble_measure",
    "ChoraleGenerator",
    "generate_chorale",
]

# Duration symbol used for one beat of each supported beat value.
BEAT_DURATIONS: Dict[int, str] = {2: "h", 4: "q", 8: "8", 16: "16"}

# Voice-leading checks run only when dissonance strictness exceeds this.
VALIDATION_STRICTNESS = 3


def duration_symbol(beat_value: int) -> str:
    try:
        return BEAT_DURATIONS[beat_value]
    except KeyError:
        raise ValueError(f"Unsupported beat value: {beat_value}") from None


def assemble_measure(
    voicing: Voicing, beats: int, duration: str
) -> Tuple[Dict[str, List[NoteEvent]], Voicing]:
    """Expand ``voicing`` into ``beats`` events per voice.

    Returns
    -------
    tuple
        ``(events, carried)`` where ``events`` maps each voice to its list of
        events for the measure and ``carried`` is the voicing to pass to the
        next measure.  Voices without a pitch rest on every beat and carry
        ``None``.
    """

    events: Dict[str, List[NoteEvent]] = {}
    carried: Dict[str, Optional[int]] = {}
    for voice in VOICE_ORDER:
        pitch = voicing[voice]
        if pitch is None:
            events[voice] = [NoteEvent.rest(duration) for _ in range(beats)]
        else:
            events[voice] = [NoteEvent(pitch, duration) for _ in range(beats)]
        carried[voice] = pitch
    return events, Voicing(**carried)


def _resolve_key(key: Union[str, Key]) -> Key:
    return get_key(key) if isinstance(key, str) else key


def _resolve_meter(meter: Union[str, Tuple[int, int]]) -> Tuple[int, int]:
    if isinstance(meter, str):
        return validate_time_signature(meter)
    return validate_meter(meter)


class ChoraleGenerator:
    """Generate SATB chorales from a single random source.

    Parameters
    ----------
    rng:
        Random source shared by the progression generator and the voice
        assigner.  Two generators built from equally seeded sources produce
        identical chorales.
    ranges, spacing:
        Optional overrides for the package voice ranges and spacing limits.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        *,
        ranges: Optional[Dict[str, Tuple[int, int]]] = None,
        spacing: Optional[Dict[str, int]] = None,
    ) -> None:
        self.rng = rng or random.Random()
        self.spacing = spacing
        self.harmony = HarmonyGenerator(self.rng)
        self.assigner = VoiceAssigner(ranges, spacing, self.rng)

    def generate_progression(
        self, key: Union[str, Key], num_measures: int, harmonic_complexity: int
    ) -> List[str]:
        return self.harmony.generate(_resolve_key(key), num_measures, harmonic_complexity)

    def generate_voices(
        self,
        progression: Sequence[str],
        key: Union[str, Key],
        meter: Union[str, Tuple[int, int]],
        num_measures: int,
        settings: GenerationSettings,
    ) -> Tuple[VoicesData, List[Voicing], List[VoiceLeadingIssue]]:
        """Voice ``progression`` measure by measure.

        Parameters
        ----------
        progression:
            One Roman numeral per measure; entries beyond ``num_measures`` are
            ignored.
        key, meter:
            Key name or :class:`Key`, and ``"4/4"`` style string or
            ``(beats, beat_value)`` pair.
        num_measures:
            Number of measures to produce.
        settings:
            Style sliders for the run.

        Returns
        -------
        tuple
            ``(voices, voicings, issues)``.

        Raises
        ------
        ValueError
            If the key or meter is invalid, ``num_measures`` is not positive or
            the progression is shorter than ``num_measures``.
        """

        key = _resolve_key(key)
        beats, beat_value = _resolve_meter(meter)
        validate_measures(num_measures)
        if len(progression) < num_measures:
            raise ValueError(
                f"Progression has {len(progression)} chords but {num_measures} measures were requested"
            )
        duration = duration_symbol(beat_value)
        lt = leading_tone(key)
        validate = settings.dissonance_strictness > VALIDATION_STRICTNESS

        voices = VoicesData()
        voicings: List[Voicing] = []
        issues: List[VoiceLeadingIssue] = []
        previous = Voicing.empty()

        for measure, roman in enumerate(progression[:num_measures]):
            chord = resolve_chord(roman, key)
            if chord.is_empty:
                logging.error(
                    "Measure %d: could not resolve chord %r in %s; writing rests.",
                    measure + 1,
                    roman,
                    key.name,
                )
                events, previous = assemble_measure(Voicing.empty(), beats, duration)
                voices.extend(events)
                voicings.append(previous)
                continue

            pool = expand_note_pool(chord.pitches)
            voicing = self.assigner.assign(
                chord, pool, previous, settings.melodic_smoothness, lt
            )
            logging.debug(
                "Measure %d %s (%s): %s",
                measure + 1,
                roman,
                chord.symbol,
                format_voicing(voicing, key),
            )
            if validate:
                issues.extend(check_voice_leading(voicing, previous, measure, self.spacing))

            events, previous = assemble_measure(voicing, beats, duration)
            voices.extend(events)
            voicings.append(previous)

        return voices, voicings, issues

    def generate(
        self,
        key: Union[str, Key],
        meter: Union[str, Tuple[int, int]],
        num_measures: int,
        settings: Optional[GenerationSettings] = None,
        progression: Optional[Sequence[str]] = None,
    ) -> Chorale:
        """Generate a complete chorale.

        All inputs are validated before the first measure is produced.  When
        ``progression`` is omitted one is drawn from the harmonic complexity
        slider.

        Raises
        ------
        ValueError
            On an unknown key, malformed meter, unsupported beat value,
            non-positive measure count or a progression shorter than the
            measure count.
        """

        key = _resolve_key(key)
        meter = _resolve_meter(meter)
        validate_measures(num_measures)
        settings = settings or GenerationSettings()

        if progression is None:
            progression = self.generate_progression(key, num_measures, settings.harmonic_complexity)
        progression = list(progression)

        voices, voicings, issues = self.generate_voices(
            progression, key, meter, num_measures, settings
        )
        logging.info(
            "Generated %d measures in %s %d/%d with %d voice-leading issue(s).",
            num_measures,
            key.name,
            meter[0],
            meter[1],
            len(issues),
        )
        return Chorale(
            key=key,
            meter=meter,
            num_measures=num_measures,
            settings=settings,
            progression=progression[:num_measures],
            voices=voices,
            voicings=voicings,
            issues=issues,
        )


def generate_chorale(
    key: Union[str, Key],
    meter: Union[str, Tuple[int, int]],
    num_measures: int,
    settings: Optional[GenerationSettings] = None,
    *,
    progression: Optional[Sequence[str]] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
) -> Chorale:
    """Convenience wrapper around :meth:`ChoraleGenerator.generate`.

    ``seed`` builds a fresh ``random.Random`` when ``rng`` is not supplied.
    """

    if rng is None and seed is not None:
        rng = random.Random(seed)
    return ChoraleGenerator(rng).generate(key, meter, num_measures, settings, progression)
