"""Pitch scoring and motion classification for voice leading.

:func:`find_closest_note` is the primitive every voice assignment goes
through.  It scores candidate pitches by their distance to a target, scaled by
how large a melodic move they would require from the voice's previous pitch.
The *smoothness* slider controls how strongly small moves are rewarded.

Cost model
----------
``cost = |candidate - target| * factor`` where, with ``w = smoothness / 10``
and ``interval = |candidate - previous|``:

========================  ===============================================
motion                    factor
========================  ===============================================
unison                    ``UNISON_FACTOR * (SMOOTHNESS_CEILING - w)``
step (<= ``STEP_LIMIT``)  ``STEP_FACTOR * (SMOOTHNESS_CEILING - w)``
within leap threshold     ``1.0 + (interval / threshold) * w * 0.5``
beyond leap threshold     ``LEAP_BASE + (interval / OCTAVE) * w``
========================  ===============================================

Unisons are cheapest, steps next and leaps progressively more expensive.
When the winner still leaps past the threshold, a stepwise alternative is
preferred if it lands reasonably close to the target.

Example
-------
>>> find_closest_note(64, [60, 64, 67], previous=62, smoothness=5)
64
>>> parallel_motion(55, 48, 57, 50)
'parallel_fifth'
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

OCTAVE = 12
PERFECT_FIFTH = 7

# Motion cost constants.  Their ordering is the behavioural contract of the
# smoothness slider: unison < step < leap within threshold < wide leap.
UNISON_FACTOR = 0.1
STEP_FACTOR = 0.5
SMOOTHNESS_CEILING = 1.1
LEAP_BASE = 1.5
STEP_LIMIT = 2
LEAP_PREFERENCE_FACTOR = 2.0


def motion_costs(
    target: float,
    candidates: Sequence[int],
    previous: Optional[int],
    smoothness: float,
    leap_threshold: int = PERFECT_FIFTH,
) -> np.ndarray:
    """Return the cost of every candidate as a float array.

    The computation is vectorised so scoring a whole note pool costs a handful
    of array operations rather than a Python loop per candidate.
    """

    cands = np.asarray(candidates, dtype=np.float64)
    costs = np.abs(cands - target)
    if previous is None:
        return costs

    weight = smoothness / 10.0
    intervals = np.abs(cands - previous)
    factors = np.select(
        [intervals == 0, intervals <= STEP_LIMIT, intervals <= leap_threshold],
        [
            np.full_like(intervals, UNISON_FACTOR * (SMOOTHNESS_CEILING - weight)),
            np.full_like(intervals, STEP_FACTOR * (SMOOTHNESS_CEILING - weight)),
            1.0 + (intervals / leap_threshold) * (weight * 0.5),
        ],
        default=LEAP_BASE + (intervals / OCTAVE) * weight,
    )
    return costs * factors


def find_closest_note(
    target: float,
    candidates: Sequence[int],
    previous: Optional[int] = None,
    smoothness: float = 5,
    leap_threshold: int = PERFECT_FIFTH,
):
    """Pick the best pitch from ``candidates``.

    Parameters
    ----------
    target:
        Pitch the caller would ideally like (may be fractional, e.g. a
        midpoint between two voices).
    candidates:
        Allowed MIDI pitches.
    previous:
        The voice's pitch in the previous measure, or ``None``.
    smoothness:
        Slider value ``0-10``; higher values favour small motion.
    leap_threshold:
        Largest interval in semitones not treated as a wide leap.

    Returns
    -------
    int
        One of ``candidates``.  With no candidates ``previous`` is returned
        when available, otherwise ``target`` unchanged.
    """

    if len(candidates) == 0:
        return previous if previous is not None else target
    if len(candidates) == 1:
        return candidates[0]

    costs = motion_costs(target, candidates, previous, smoothness, leap_threshold)
    # ``argmin`` returns the first minimum so earlier (lower) pitches win ties.
    best_index = int(np.argmin(costs))
    best = candidates[best_index]
    min_cost = float(costs[best_index])

    if previous is not None and abs(best - previous) > leap_threshold:
        steps = [n for n in candidates if abs(n - previous) <= STEP_LIMIT]
        if steps:
            best_step = min(steps, key=lambda n: abs(n - target))
            if abs(best_step - target) < min_cost * LEAP_PREFERENCE_FACTOR:
                best = best_step
    return best


def parallel_motion(
    prev_upper: Optional[int],
    prev_lower: Optional[int],
    next_upper: Optional[int],
    next_lower: Optional[int],
) -> Optional[str]:
    """Classify motion between two voices across a chord change.

    Returns ``"parallel_fifth"`` or ``"parallel_octave"`` (which includes
    unisons) when both voices moved and the octave-reduced interval is a
    perfect fifth or a perfect octave at both instants.  Otherwise ``None``,
    including when any pitch is missing.
    """

    if None in (prev_upper, prev_lower, next_upper, next_lower):
        return None
    if prev_upper == next_upper or prev_lower == next_lower:
        return None

    interval_prev = abs(prev_upper - prev_lower) % OCTAVE
    interval_next = abs(next_upper - next_lower) % OCTAVE
    if interval_prev == PERFECT_FIFTH and interval_next == PERFECT_FIFTH:
        return "parallel_fifth"
    if interval_prev == 0 and interval_next == 0:
        return "parallel_octave"
    return None
