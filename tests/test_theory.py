"""Tests for the diatonic theory lookups."""

import importlib
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

theory = importlib.import_module("chorale_generator.theory")


@pytest.mark.parametrize(
    "name, tonic, root, mode, alteration",
    [
        ("C", "C", 0, "major", 0),
        ("Eb", "Eb", 3, "major", -3),
        ("f#m", "F#", 6, "minor", 3),
        ("Bb minor", "Bb", 10, "minor", -5),
        ("A", "A", 9, "major", 3),
        ("Am", "A", 9, "minor", 0),
    ],
)
def test_get_key_resolves_mode_and_signature(name, tonic, root, mode, alteration):
    """Key names resolve to tonic, pitch class, mode and signature size."""
    key = theory.get_key(name)
    assert key.tonic == tonic
    assert key.root == root
    assert key.mode == mode
    assert key.alteration == alteration


@pytest.mark.parametrize("name", ["H", "", "C##m#", "Lydian", "Fbb", "D##", "D##m", "Ebb minor"])
def test_get_key_rejects_unknown(name):
    with pytest.raises(ValueError):
        theory.get_key(name)


def test_diatonic_triads_major():
    assert theory.diatonic_triads(theory.get_key("C")) == [
        "C", "Dm", "Em", "F", "G", "Am", "Bdim",
    ]


def test_diatonic_triads_flat_key_spelling():
    """Scales are spelled with one letter per degree."""
    assert theory.diatonic_triads(theory.get_key("F")) == [
        "F", "Gm", "Am", "Bb", "C", "Dm", "Edim",
    ]


def test_diatonic_triads_minor_uses_raised_leading_tone():
    """Minor keys have a major dominant and a diminished chord on the raised seventh."""
    assert theory.diatonic_triads(theory.get_key("Am")) == [
        "Am", "Bdim", "C", "Dm", "E", "F", "G#dim",
    ]


def test_chord_info_known_and_unknown():
    info = theory.chord_info("G7")
    assert info.tonic == "G"
    assert info.root == 7
    assert info.intervals == ("1P", "3M", "5P", "7m")
    assert not info.empty

    assert theory.chord_info("Bdim7").intervals == ("1P", "3m", "5d", "7d")
    assert theory.chord_info("Xyz").empty
    assert theory.chord_info("Cqq").empty


@pytest.mark.parametrize(
    "interval, semitones",
    [("1P", 0), ("3m", 3), ("3M", 4), ("5d", 6), ("5P", 7), ("5A", 8), ("7m", 10), ("7d", 9), ("9M", 14)],
)
def test_interval_semitones(interval, semitones):
    assert theory.interval_semitones(interval) == semitones


@pytest.mark.parametrize("interval", ["3P", "5M", "P5", "0P", ""])
def test_interval_semitones_invalid(interval):
    assert theory.interval_semitones(interval) is None


def test_note_helpers():
    assert theory.note_pitch_class("Eb") == 3
    assert theory.note_pitch_class("B#") == 0
    assert theory.note_pitch_class("H") is None
    assert theory.note_midi("C4") == 60
    assert theory.note_midi("A0") == 21
    assert theory.note_midi("G10") is None
    assert theory.note_midi("C") is None


def test_scale_pitch_classes():
    assert theory.scale_pitch_classes("C major") == [0, 2, 4, 5, 7, 9, 11]
    assert theory.scale_pitch_classes("A harmonic minor") == [9, 11, 0, 2, 4, 5, 8]
    assert theory.scale_pitch_classes("C lydian") == []
    assert theory.scale_pitch_classes("Q major") == []


def test_leading_tone():
    assert theory.leading_tone(theory.get_key("C")) == 11
    assert theory.leading_tone(theory.get_key("Am")) == 8
    assert theory.leading_tone(theory.get_key("Eb")) == 2


def test_chord_info_flat_roots():
    """A flat sign belongs to the root, never to the chord quality."""
    info = theory.chord_info("Bb")
    assert info.tonic == "Bb"
    assert info.root == 10
    assert info.intervals == ("1P", "3M", "5P")
    assert not info.empty

    minor = theory.chord_info("Ebm")
    assert minor.tonic == "Eb"
    assert minor.root == 3
    assert minor.intervals == ("1P", "3m", "5P")

    assert theory.chord_info("Abdim").intervals == ("1P", "3m", "5d")
    assert theory.chord_info("Bbb").root == 9


@pytest.mark.parametrize("name", theory.STANDARD_KEYS)
def test_every_standard_key_triad_is_known(name):
    for symbol in theory.diatonic_triads(theory.get_key(name)):
        assert not theory.chord_info(symbol).empty, symbol
