"""Roman-numeral chord progression generator.

This module builds the harmonic skeleton of a chorale: one Roman numeral per
measure, opening on the tonic and closing with a dominant-to-tonic cadence.
The rules are intentionally small so progressions stay recognisably
functional while the *harmonic complexity* slider widens the vocabulary.

Vocabulary tiers
----------------
* primary (always): tonic, subdominant, dominant
* secondary (complexity >= 3): submediant, supertonic
* tertiary (complexity >= 7): mediant, leading-tone
* complexity >= 5 upgrades the dominant triad to a dominant seventh

Example
-------
>>> import random
>>> generate_chord_progression("C", 4, 0, rng=random.Random(1))[-2:]
['V', 'I']
"""

# 2025-01-12: The repeat-avoidance retry is an explicit counted loop so
# termination is obvious and independent of the random source.
# 2025-01-19: Randomness comes from an injected ``random.Random`` so progressions
# are reproducible per generator without touching the global RNG.

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Union

from .models import Key
from .theory import get_key

# Number of redraws allowed when a draw repeats the previous chord.
MAX_REPEAT_ATTEMPTS = 5

SECONDARY_COMPLEXITY = 3
SEVENTH_COMPLEXITY = 5
TERTIARY_COMPLEXITY = 7


@dataclass(frozen=True)
class RomanNumerals:
    """Roman numeral spelling of each harmonic function for one mode."""

    tonic: str
    supertonic: str
    mediant: str
    subdominant: str
    dominant: str
    submediant: str
    leading_tone: str
    dominant_seventh: str = "V7"


MAJOR_NUMERALS = RomanNumerals("I", "ii", "iii", "IV", "V", "vi", "vii°")
MINOR_NUMERALS = RomanNumerals("i", "ii°", "III", "iv", "V", "VI", "vii°")


def numerals_for(key: Key) -> RomanNumerals:
    return MINOR_NUMERALS if key.is_minor else MAJOR_NUMERALS


def allowed_chords(key: Union[str, Key], harmonic_complexity: int) -> List[str]:
    """Return the chord vocabulary for ``key`` at ``harmonic_complexity``.

    The order is stable (primary, secondary, tertiary) and free of duplicates.
    """

    if isinstance(key, str):
        key = get_key(key)
    n = numerals_for(key)

    chords = [n.tonic, n.subdominant, n.dominant]
    if harmonic_complexity >= SECONDARY_COMPLEXITY:
        chords += [n.submediant, n.supertonic]
    if harmonic_complexity >= TERTIARY_COMPLEXITY:
        chords += [n.mediant, n.leading_tone]
    if harmonic_complexity >= SEVENTH_COMPLEXITY:
        if n.dominant in chords:
            chords = [n.dominant_seventh if c == n.dominant else c for c in chords]
        elif n.dominant_seventh not in chords:
            chords.append(n.dominant_seventh)

    unique: List[str] = []
    for chord in chords:
        if chord not in unique:
            unique.append(chord)
    return unique


def _preferred_successors(previous: str, n: RomanNumerals) -> Optional[List[str]]:
    """Functional tendencies: which chords should follow ``previous``."""

    if previous in (n.subdominant, n.supertonic):
        return [n.dominant, n.dominant_seventh, n.leading_tone]
    if previous in (n.dominant, n.dominant_seventh):
        return [n.tonic, n.submediant]
    if previous == n.submediant:
        return [n.supertonic, n.subdominant, n.dominant, n.dominant_seventh]
    return None


class HarmonyGenerator:
    """Generate Roman-numeral progressions from a seeded random source."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def _next_chord(self, previous: str, vocabulary: List[str], n: RomanNumerals) -> str:
        candidates = vocabulary
        preferred = _preferred_successors(previous, n)
        if preferred is not None:
            filtered = [c for c in vocabulary if c in preferred]
            if filtered:
                candidates = filtered

        choice = self.rng.choice(candidates)
        attempts = 1
        while choice == previous and len(vocabulary) > 1 and attempts < MAX_REPEAT_ATTEMPTS:
            choice = self.rng.choice(candidates)
            attempts += 1
        return choice

    def generate(self, key: Union[str, Key], num_measures: int, harmonic_complexity: int) -> List[str]:
        """Return ``num_measures`` Roman numerals for ``key``.

        Parameters
        ----------
        key:
            Key name or resolved :class:`~chorale_generator.models.Key`.
        num_measures:
            Length of the progression; one chord per measure.
        harmonic_complexity:
            Slider value ``0-10`` selecting the vocabulary tiers.

        Raises
        ------
        ValueError
            If ``key`` is unknown or ``num_measures`` is not positive.
        """

        if isinstance(key, str):
            key = get_key(key)
        if num_measures <= 0:
            raise ValueError("num_measures must be positive")

        n = numerals_for(key)
        vocabulary = allowed_chords(key, harmonic_complexity)

        progression = [n.tonic]
        previous = n.tonic
        for _ in range(1, num_measures - 1):
            previous = self._next_chord(previous, vocabulary, n)
            progression.append(previous)

        if num_measures > 2:
            pre_cadence = n.dominant_seventh if n.dominant_seventh in vocabulary else n.dominant
            progression.append(n.tonic)
            progression[-2] = pre_cadence
        elif num_measures == 2:
            progression.append(n.tonic)

        logging.info(
            "Generated progression (%s, complexity %d): %s",
            key.name,
            harmonic_complexity,
            " - ".join(progression),
        )
        return progression


def generate_chord_progression(
    key: Union[str, Key],
    num_measures: int,
    harmonic_complexity: int,
    *,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Convenience wrapper around :meth:`HarmonyGenerator.generate`."""

    return HarmonyGenerator(rng).generate(key, num_measures, harmonic_complexity)
