"""Tests for candidate scoring and parallel motion detection."""

import importlib
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

vl = importlib.import_module("chorale_generator.voice_leading")


def test_no_candidates_returns_previous_or_target():
    assert vl.find_closest_note(64, [], previous=62) == 62
    assert vl.find_closest_note(64.5, []) == 64.5


def test_single_candidate_is_returned():
    assert vl.find_closest_note(40, [72], previous=30, smoothness=10) == 72


def test_without_previous_picks_nearest_to_target():
    assert vl.find_closest_note(65, [60, 64, 67, 72]) == 64


def test_ties_prefer_the_first_candidate():
    assert vl.find_closest_note(62, [60, 64]) == 60


def test_cost_ordering_favours_small_motion():
    """Unison is cheapest, then steps, then leaps within and beyond the threshold."""
    costs = vl.motion_costs(70, [60, 62, 66, 72], previous=60, smoothness=5)
    per_semitone = costs / np.abs(np.array([60, 62, 66, 72]) - 70)
    assert per_semitone[0] < per_semitone[1] < per_semitone[2] < per_semitone[3]


def test_smoothness_keeps_voice_near_previous():
    candidates = [60, 64, 67, 72]
    assert vl.find_closest_note(68, candidates) == 67
    assert vl.find_closest_note(68, candidates, previous=64, smoothness=10) == 64


def test_wide_leap_replaced_by_step_close_to_target():
    # 68 wins on cost, but 62 is a step from 60 and close enough to the target.
    costs = vl.motion_costs(66.4, [62, 68], previous=60, smoothness=0)
    assert costs[1] < costs[0]
    assert vl.find_closest_note(66.4, [62, 68], previous=60, smoothness=0) == 62
    assert vl.find_closest_note(66.4, [62, 68]) == 68


def test_wide_leap_kept_when_no_step_exists():
    assert vl.find_closest_note(72, [64, 72], previous=55, smoothness=0) == 72


@pytest.mark.parametrize(
    "prev_upper, prev_lower, next_upper, next_lower, expected",
    [
        (55, 48, 57, 50, "parallel_fifth"),
        (67, 48, 69, 50, "parallel_fifth"),
        (60, 48, 62, 50, "parallel_octave"),
        (60, 60, 62, 62, "parallel_octave"),
        (55, 48, 55, 50, None),
        (55, 48, 57, 48, None),
        (55, 48, 60, 50, None),
        (None, 48, 57, 50, None),
        (48, 55, 50, 57, "parallel_fifth"),
    ],
)
def test_parallel_motion(prev_upper, prev_lower, next_upper, next_lower, expected):
    assert vl.parallel_motion(prev_upper, prev_lower, next_upper, next_lower) == expected


def test_module_docstring_examples():
    """The usage examples in the module docstring stay accurate."""
    import doctest

    results = doctest.testmod(vl)
    assert results.attempted >= 2
    assert results.failed == 0
