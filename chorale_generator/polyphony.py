"""Four-voice pitch assignment for a single chord.

:class:`VoiceAssigner` places the voices of one measure in dependency order:
the bass first (anchored on the chord root), then the soprano (a freely moving
melody), then the alto and tenor which must fit between them.  Each step
filters the measure's note pool down to the pitches legal for that voice and
lets :func:`~chorale_generator.voice_leading.find_closest_note` choose among
them.

Windows
-------
Every voice is confined to a window built from its range, the voices already
placed and the spacing limits:

* soprano: its range, at least ``INNER_VOICE_ROOM`` semitones above the bass
* alto: its range, below the soprano, two semitones above the bass, within
  the soprano-alto limit and close enough to the bass for a tenor to fit
* tenor: its range, below the alto, above the bass, within the alto-tenor and
  tenor-bass limits

With the default SATB ranges each window is non-empty whatever the earlier
voices chose, so forced fallbacks are clamped into the window and
``soprano > alto > tenor > bass`` holds for every voicing.

Example
-------
>>> import random
>>> from chorale_generator import resolve_chord, expand_note_pool, get_key
>>> key = get_key("C")
>>> chord = resolve_chord("I", key)
>>> assigner = VoiceAssigner(rng=random.Random(0))
>>> v = assigner.assign(chord, expand_note_pool(chord.pitches), Voicing.empty(), 5, 11)
>>> v.soprano > v.alto > v.tenor > v.bass
True
"""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Sequence, Tuple

from . import VOICE_ORDER, VOICE_RANGES, VOICE_SPACING_LIMIT
from .models import Chord, Voicing
from .voice_leading import PERFECT_FIFTH, find_closest_note

# Minimum soprano-bass distance leaving one semitone each for alto and tenor.
INNER_VOICE_ROOM = 3

# Range of the random upward step used to aim the soprano.
SOPRANO_STEP_MIN = 1
SOPRANO_STEP_MAX = 5

# Without a previous soprano the line starts this far above the range floor.
SOPRANO_START_OFFSET = 5

# Number of inner voices that receive a target pitch class.
INNER_VOICES = 2


def _clamp(value: float, low: int, high: int) -> int:
    return int(max(low, min(high, round(value))))


class VoiceAssigner:
    """Assign SATB pitches for one chord at a time."""

    voices = VOICE_ORDER

    def __init__(
        self,
        ranges: Optional[Dict[str, Tuple[int, int]]] = None,
        spacing: Optional[Dict[str, int]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Create a new assigner.

        Parameters
        ----------
        ranges:
            Optional per-voice ``(low, high)`` MIDI ranges overriding
            :data:`~chorale_generator.VOICE_RANGES`.
        spacing:
            Optional overrides for :data:`~chorale_generator.VOICE_SPACING_LIMIT`.
        rng:
            Random source for soprano steps and inner-voice nudges.
        """

        self.ranges = {**VOICE_RANGES, **(ranges or {})}
        self.spacing = {**VOICE_SPACING_LIMIT, **(spacing or {})}
        self.rng = rng or random.Random()

    def _in_window(self, pool: Sequence[int], low: int, high: int) -> List[int]:
        return [n for n in pool if low <= n <= high]

    def _nudge(self, previous: int) -> int:
        return previous + (1 if self.rng.random() > 0.5 else -1)

    def _select(
        self,
        target: float,
        allowed: List[int],
        target_pc: int,
        previous: Optional[int],
        smoothness: int,
    ) -> Optional[int]:
        """Prefer pitches of ``target_pc``; fall back to anything allowed."""

        options = [n for n in allowed if n % 12 == target_pc]
        if options:
            return find_closest_note(target, options, previous, smoothness)
        if allowed:
            return find_closest_note(target, allowed, previous, smoothness)
        return None

    # ------------------------------------------------------------------
    # Outer voices
    # ------------------------------------------------------------------

    def assign_bass(
        self,
        chord_root: int,
        pool: Sequence[int],
        previous: Optional[int],
        smoothness: int,
    ) -> int:
        """Return a bass pitch, preferring the chord root's pitch class."""

        low, high = self.ranges["bass"]
        allowed = self._in_window(pool, low, high)
        if not allowed:
            logging.warning("No valid bass notes found in range; using fallback.")
            return previous if previous is not None else low

        target = previous if previous is not None else chord_root - 12
        root_options = [n for n in allowed if n % 12 == chord_root % 12]
        if not root_options:
            logging.info("Chord root pitch class %d not available in bass range.", chord_root % 12)
            root_options = allowed
        return find_closest_note(target, root_options, previous, smoothness)

    def assign_soprano(
        self,
        pool: Sequence[int],
        previous: Optional[int],
        smoothness: int,
        bass: int,
    ) -> int:
        """Return a soprano pitch drifting upward from ``previous``."""

        low, high = self.ranges["soprano"]
        floor = max(low, bass + INNER_VOICE_ROOM)
        allowed = self._in_window(pool, floor, high)
        if not allowed:
            logging.warning("No valid soprano notes found in range; using fallback.")
            return _clamp(previous if previous is not None else high, floor, high)

        if previous is not None:
            target = previous + self.rng.randint(SOPRANO_STEP_MIN, SOPRANO_STEP_MAX)
        else:
            target = low + SOPRANO_START_OFFSET
        return find_closest_note(target, allowed, previous, smoothness)

    # ------------------------------------------------------------------
    # Inner voices
    # ------------------------------------------------------------------

    def inner_voice_targets(
        self,
        chord: Chord,
        bass: int,
        soprano: int,
        leading_tone: int,
    ) -> Tuple[int, int]:
        """Return ``(tenor_pc, alto_pc)`` completing the chord.

        Pitch classes the outer voices miss come first.  Remaining slots are
        filled by doubling the root, then the fifth, then the third; the
        leading tone is never doubled.  The root is forced in as a last resort.
        """

        covered = {bass % 12, soprano % 12}
        chord_pcs = chord.pitch_classes
        targets = [pc for pc in chord_pcs if pc not in covered]

        if len(targets) < INNER_VOICES:
            root = chord.root_pitch % 12
            fifth = (root + PERFECT_FIFTH) % 12
            third = next((pc for pc in chord_pcs if pc not in (root, fifth)), None)
            doublings = [root, fifth if fifth in chord_pcs else None, third]
            for pc in doublings:
                if len(targets) >= INNER_VOICES:
                    break
                if pc is None or pc == leading_tone or pc in covered or pc in targets:
                    continue
                targets.append(pc)
            while len(targets) < INNER_VOICES:
                targets.append(root)

        return targets[0], targets[1]

    def alto_window(self, soprano: int, bass: int) -> Tuple[int, int]:
        low, high = self.ranges["alto"]
        floor = max(low, bass + 2, soprano - self.spacing["soprano_alto"])
        ceiling = min(
            high,
            soprano - 1,
            bass + self.spacing["alto_tenor"] + self.spacing["tenor_bass"],
        )
        return floor, ceiling

    def tenor_window(self, alto: int, bass: int) -> Tuple[int, int]:
        low, high = self.ranges["tenor"]
        floor = max(low, bass + 1, alto - self.spacing["alto_tenor"])
        ceiling = min(high, alto - 1, bass + self.spacing["tenor_bass"])
        return floor, ceiling

    def assign_alto(
        self,
        pool: Sequence[int],
        previous: Optional[int],
        soprano: int,
        bass: int,
        target_pc: int,
        smoothness: int,
    ) -> int:
        """Return an alto pitch between the outer voices."""

        floor, ceiling = self.alto_window(soprano, bass)
        allowed = self._in_window(pool, floor, ceiling)
        target = self._nudge(previous) if previous is not None else (soprano + bass) / 2

        alto = self._select(target, allowed, target_pc, previous, smoothness)
        if alto is None:
            alto = _clamp(target, floor, ceiling)
            logging.warning("No valid notes for alto; forcing %d.", alto)
        return alto

    def assign_tenor(
        self,
        pool: Sequence[int],
        previous: Optional[int],
        alto: int,
        bass: int,
        target_pc: int,
        smoothness: int,
        leading_tone: int,
    ) -> int:
        """Return a tenor pitch below ``alto`` and above ``bass``.

        When no chord tone fits, the tenor is forced two semitones below the
        alto (one if that would land on the leading tone) and clamped into its
        window.
        """

        floor, ceiling = self.tenor_window(alto, bass)
        allowed = self._in_window(pool, floor, ceiling)
        target = self._nudge(previous) if previous is not None else (alto + bass) / 2

        tenor = self._select(target, allowed, target_pc, previous, smoothness)
        if tenor is None:
            forced = alto - 2
            if forced % 12 == leading_tone:
                forced = alto - 1
            forced = max(forced, bass + 1, self.ranges["tenor"][0])
            tenor = _clamp(forced, floor, ceiling)
            logging.warning("No valid notes for tenor below alto; forcing %d.", tenor)
        return tenor

    def assign(
        self,
        chord: Chord,
        pool: Sequence[int],
        previous: Voicing,
        smoothness: int,
        leading_tone: int,
    ) -> Voicing:
        """Voice ``chord`` given the previous measure's voicing."""

        if chord.is_empty:
            raise ValueError(f"Cannot voice unresolved chord {chord.roman!r}")
        bass = self.assign_bass(chord.root_pitch, pool, previous.bass, smoothness)
        soprano = self.assign_soprano(pool, previous.soprano, smoothness, bass)
        tenor_pc, alto_pc = self.inner_voice_targets(chord, bass, soprano, leading_tone)
        alto = self.assign_alto(pool, previous.alto, soprano, bass, alto_pc, smoothness)
        tenor = self.assign_tenor(
            pool, previous.tenor, alto, bass, tenor_pc, smoothness, leading_tone
        )
        return Voicing(soprano=soprano, alto=alto, tenor=tenor, bass=bass)
