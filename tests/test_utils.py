"""Tests for input validation helpers."""

import importlib
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

utils = importlib.import_module("chorale_generator.utils")


@pytest.mark.parametrize(
    "text, expected",
    [("4/4", (4, 4)), ("3/4", (3, 4)), (" 6 / 8 ", (6, 8)), ("2/2", (2, 2)), ("7/16", (7, 16))],
)
def test_validate_time_signature_valid(text, expected):
    assert utils.validate_time_signature(text) == expected


@pytest.mark.parametrize("text", ["4", "4/4/4", "a/4", "0/4", "-3/4", "4/3", "4/1", "4/32"])
def test_validate_time_signature_invalid(text):
    with pytest.raises(ValueError):
        utils.validate_time_signature(text)


def test_validate_meter_rejects_non_pairs():
    with pytest.raises(ValueError):
        utils.validate_meter(4)
    with pytest.raises(ValueError):
        utils.validate_meter((4, 4, 4))


@pytest.mark.parametrize("value", [0, -1, 2.0, True, "8"])
def test_validate_measures_invalid(value):
    with pytest.raises(ValueError):
        utils.validate_measures(value)


def test_validate_measures_valid():
    assert utils.validate_measures(12) == 12


def test_parse_progression():
    assert utils.parse_progression("I, vi,ii , V7,I") == ["I", "vi", "ii", "V7", "I"]
    assert utils.parse_progression("i,ii°,V,i") == ["i", "ii°", "V", "i"]


@pytest.mark.parametrize("text", ["", " , ", "I,X,V", "I,N6"])
def test_parse_progression_invalid(text):
    with pytest.raises(ValueError):
        utils.parse_progression(text)
