"""Plain data containers shared by the chorale generation pipeline.

Every object here is a small dataclass.  Values that travel between measures
(:class:`Voicing`) or describe user input (:class:`GenerationSettings`,
:class:`Key`) are frozen so one generation run can never mutate state that
another run or a test is still holding.

Example
-------
>>> from chorale_generator.models import NoteEvent
>>> NoteEvent(60, "q")
NoteEvent(pitch=60, duration='q', is_rest=False)
>>> NoteEvent.rest("q")
NoteEvent(pitch=None, duration='qr', is_rest=True)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from . import VOICE_ORDER

# Inclusive bounds of every style slider.
SLIDER_MIN = 0
SLIDER_MAX = 10

# Rest durations reuse the beat symbol with this suffix (``"q"`` -> ``"qr"``).
REST_SUFFIX = "r"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Key:
    """A resolved key signature.

    ``alteration`` counts sharps (positive) or flats (negative) in the key
    signature and is only used to pick enharmonic spellings.
    """

    tonic: str
    root: int
    mode: str
    alteration: int

    @property
    def is_minor(self) -> bool:
        return self.mode == "minor"

    @property
    def name(self) -> str:
        """Short key name such as ``"Eb"`` or ``"F#m"``."""
        return self.tonic + ("m" if self.is_minor else "")


@dataclass(frozen=True)
class Chord:
    """A Roman numeral resolved against a key.

    ``pitches`` holds absolute MIDI numbers anchored near the middle of the
    keyboard with the root first.  An empty tuple marks a chord that could not
    be resolved.
    """

    roman: str
    symbol: str = ""
    root: Optional[int] = None
    pitches: Tuple[int, ...] = ()
    seventh: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.pitches

    @property
    def root_pitch(self) -> Optional[int]:
        return self.pitches[0] if self.pitches else None

    @property
    def pitch_classes(self) -> List[int]:
        """Member pitch classes in chord order without duplicates."""
        pcs: List[int] = []
        for pitch in self.pitches:
            if pitch % 12 not in pcs:
                pcs.append(pitch % 12)
        return pcs


@dataclass(frozen=True)
class GenerationSettings:
    """Style sliders controlling a generation run.

    Parameters
    ----------
    harmonic_complexity:
        Size of the chord vocabulary. ``>= 3`` adds ii and vi, ``>= 5`` turns
        the dominant into a dominant seventh and ``>= 7`` adds iii and vii°.
    melodic_smoothness:
        Weight given to small melodic motion when scoring candidate pitches.
    dissonance_strictness:
        Voice-leading checks only run when this is above ``3``.

    Raises
    ------
    ValueError
        If any slider is not an integer within ``0-10``.
    """

    harmonic_complexity: int = 5
    melodic_smoothness: int = 5
    dissonance_strictness: int = 5

    def __post_init__(self) -> None:
        for name in ("harmonic_complexity", "melodic_smoothness", "dissonance_strictness"):
            value = getattr(self, name)
            # ``bool`` is an ``int`` subclass but never a meaningful slider value.
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if not SLIDER_MIN <= value <= SLIDER_MAX:
                raise ValueError(
                    f"{name} must be between {SLIDER_MIN} and {SLIDER_MAX}, got {value}"
                )

    @classmethod
    def from_difficulty(cls, difficulty: float) -> "GenerationSettings":
        """Derive all three sliders from a single ``0-10`` difficulty value.

        Higher difficulty widens the chord vocabulary and relaxes both the
        smoothness weighting and the voice-leading checks.  ``difficulty`` is
        rounded half up and clamped to ``0-10`` first.

        >>> GenerationSettings.from_difficulty(5)
        GenerationSettings(harmonic_complexity=6, melodic_smoothness=5, dissonance_strictness=6)
        """

        if isinstance(difficulty, bool) or not isinstance(difficulty, (int, float)):
            raise ValueError(f"difficulty must be a number, got {difficulty!r}")
        if not math.isfinite(difficulty):
            raise ValueError(f"difficulty must be finite, got {difficulty!r}")
        level = min(SLIDER_MAX, max(SLIDER_MIN, _round_half_up(difficulty)))
        return cls(
            harmonic_complexity=min(SLIDER_MAX, _round_half_up(3 + level * 0.5)),
            melodic_smoothness=SLIDER_MAX - level,
            dissonance_strictness=min(SLIDER_MAX, max(SLIDER_MIN, _round_half_up(10 - level * 0.8))),
        )


@dataclass(frozen=True)
class Voicing:
    """MIDI pitch per voice for one chord instance; ``None`` means no pitch."""

    soprano: Optional[int] = None
    alto: Optional[int] = None
    tenor: Optional[int] = None
    bass: Optional[int] = None

    @classmethod
    def empty(cls) -> "Voicing":
        return cls()

    def __getitem__(self, voice: str) -> Optional[int]:
        if voice not in VOICE_ORDER:
            raise KeyError(voice)
        return getattr(self, voice)

    def is_complete(self) -> bool:
        return all(self[v] is not None for v in VOICE_ORDER)

    def as_dict(self) -> Dict[str, Optional[int]]:
        return {v: self[v] for v in VOICE_ORDER}


@dataclass(frozen=True)
class NoteEvent:
    """A single beat of one voice.

    ``pitch`` is ``None`` exactly when ``is_rest`` is ``True``; constructing an
    event that breaks this rule raises ``ValueError``.
    """

    pitch: Optional[int]
    duration: str
    is_rest: bool = False

    def __post_init__(self) -> None:
        if (self.pitch is None) != self.is_rest:
            raise ValueError("pitch must be None if and only if the event is a rest")

    @classmethod
    def rest(cls, duration: str) -> "NoteEvent":
        """Return a rest lasting ``duration`` (a beat symbol such as ``"q"``)."""
        return cls(None, duration + REST_SUFFIX, True)


@dataclass
class VoicesData:
    """Four equal-length note sequences, one per voice, indexed by beat."""

    soprano: List[NoteEvent] = field(default_factory=list)
    alto: List[NoteEvent] = field(default_factory=list)
    tenor: List[NoteEvent] = field(default_factory=list)
    bass: List[NoteEvent] = field(default_factory=list)

    def __getitem__(self, voice: str) -> List[NoteEvent]:
        if voice not in VOICE_ORDER:
            raise KeyError(voice)
        return getattr(self, voice)

    def __iter__(self) -> Iterator[Tuple[str, List[NoteEvent]]]:
        for voice in VOICE_ORDER:
            yield voice, self[voice]

    def __len__(self) -> int:
        return len(self.soprano)

    def extend(self, events: Dict[str, List[NoteEvent]]) -> None:
        """Append one measure worth of ``events`` keyed by voice name."""
        for voice in VOICE_ORDER:
            self[voice].extend(events[voice])


@dataclass(frozen=True)
class VoiceLeadingIssue:
    """An advisory voice-leading finding; never alters generated output."""

    kind: str
    voices: Tuple[str, str]
    measure: int
    message: str


@dataclass
class Chorale:
    """Everything produced by one generation request.

    ``voicings`` holds the (rest-corrected) voicing of each measure in order,
    which downstream consumers can use without re-scanning ``voices``.
    """

    key: Key
    meter: Tuple[int, int]
    num_measures: int
    settings: GenerationSettings
    progression: List[str]
    voices: VoicesData
    voicings: List[Voicing] = field(default_factory=list)
    issues: List[VoiceLeadingIssue] = field(default_factory=list)

    @property
    def beats_per_measure(self) -> int:
        return self.meter[0]
