"""Advisory voice-leading checks between consecutive voicings.

The checks never change generated notes.  They report crossing, overly wide
spacing between adjacent voices and parallel perfect fifths or octaves, both as
``VoiceLeadingIssue`` values and as warning log lines.
"""

from __future__ import annotations

import logging
from itertools import combinations
from typing import Dict, List, Optional

from . import VOICE_ORDER, VOICE_SPACING_LIMIT
from .models import VoiceLeadingIssue, Voicing
from .note_utils import midi_to_note
from .voice_leading import parallel_motion

# Adjacent voice pairs (upper, lower) and the spacing limit that applies.
ADJACENT_PAIRS = (
    ("soprano", "alto", "soprano_alto"),
    ("alto", "tenor", "alto_tenor"),
    ("tenor", "bass", "tenor_bass"),
)

_PARALLEL_LABELS = {
    "parallel_fifth": "Parallel fifths",
    "parallel_octave": "Parallel octaves/unisons",
}


def _name(pitch: int) -> str:
    return midi_to_note(pitch) if 0 <= pitch <= 127 else str(pitch)


def check_voice_leading(
    current: Voicing,
    previous: Voicing,
    measure: int,
    spacing: Optional[Dict[str, int]] = None,
) -> List[VoiceLeadingIssue]:
    """Return every voice-leading issue found in ``current``.

    Parameters
    ----------
    current:
        Voicing of the measure being checked.
    previous:
        Carried voicing of the preceding measure; ``Voicing.empty()`` skips the
        parallel-motion checks.
    measure:
        Zero-based measure index, reported one-based in messages.
    spacing:
        Optional overrides for :data:`~chorale_generator.VOICE_SPACING_LIMIT`.
    """

    limits = {**VOICE_SPACING_LIMIT, **(spacing or {})}
    label = f"M{measure + 1}"
    issues: List[VoiceLeadingIssue] = []

    for upper, lower, limit_key in ADJACENT_PAIRS:
        high, low = current[upper], current[lower]
        if high is None or low is None:
            continue
        if low > high:
            issues.append(
                VoiceLeadingIssue(
                    "crossing",
                    (upper, lower),
                    measure,
                    f"{label}: Voice crossing {lower.capitalize()} ({_name(low)}) "
                    f"above {upper.capitalize()} ({_name(high)})",
                )
            )
        gap = abs(high - low)
        if gap > limits[limit_key]:
            issues.append(
                VoiceLeadingIssue(
                    "spacing",
                    (upper, lower),
                    measure,
                    f"{label}: Spacing {upper.capitalize()}-{lower.capitalize()} "
                    f"of {gap} semitones exceeds {limits[limit_key]}",
                )
            )

    for upper, lower in combinations(VOICE_ORDER, 2):
        kind = parallel_motion(previous[upper], previous[lower], current[upper], current[lower])
        if kind is None:
            continue
        issues.append(
            VoiceLeadingIssue(
                kind,
                (upper, lower),
                measure,
                f"{label}: {_PARALLEL_LABELS[kind]} between "
                f"{upper.capitalize()} and {lower.capitalize()} "
                f"({_name(previous[upper])}/{_name(previous[lower])} -> "
                f"{_name(current[upper])}/{_name(current[lower])})",
            )
        )

    for issue in issues:
        logging.warning(issue.message)
    return issues
