"""Tests for writing chorales to MIDI files."""

import importlib
import sys
from pathlib import Path

import mido
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

cg = importlib.import_module("chorale_generator")
midi_io = importlib.import_module("chorale_generator.midi_io")


@pytest.fixture
def chorale():
    return cg.generate_chorale("Eb", "3/4", 4, seed=3)


def _notes(track):
    return [msg for msg in track if msg.type == "note_on"]


def test_writes_one_track_per_voice(chorale, tmp_path):
    out = tmp_path / "nested" / "chorale.mid"
    mid = midi_io.create_midi_file(chorale, 90, out)
    assert out.exists()
    assert len(mid.tracks) == 5
    names = [track.name for track in mid.tracks]
    assert names == ["Conductor", "Soprano", "Alto", "Tenor", "Bass"]

    for voice, track in zip(cg.VOICE_ORDER, mid.tracks[1:]):
        pitches = [msg.note for msg in _notes(track)]
        assert pitches == [event.pitch for event in chorale.voices[voice]]


def test_conductor_meta_messages(chorale, tmp_path):
    mid = midi_io.create_midi_file(chorale, 90, tmp_path / "c.mid")
    meta = {msg.type: msg for msg in mid.tracks[0] if msg.is_meta}
    assert meta["set_tempo"].tempo == mido.bpm2tempo(90)
    assert (meta["time_signature"].numerator, meta["time_signature"].denominator) == (3, 4)
    assert meta["key_signature"].key == "Eb"


def test_written_file_reads_back(chorale, tmp_path):
    out = tmp_path / "c.mid"
    midi_io.create_midi_file(chorale, 120, out)
    loaded = mido.MidiFile(out)
    assert loaded.ticks_per_beat == midi_io.TICKS_PER_BEAT
    assert len(loaded.tracks) == 5
    # Four measures of 3/4 at 120 bpm last six seconds.
    assert loaded.length == pytest.approx(6.0)


def test_rests_advance_time(tmp_path):
    chorale = cg.generate_chorale("C", "4/4", 3, progression=["I", "X", "I"], seed=1)
    mid = midi_io.create_midi_file(chorale, 60, tmp_path / "rests.mid")
    soprano = mid.tracks[1]
    notes = _notes(soprano)
    assert len(notes) == 8
    # The first note after the resting measure waits four quarter notes.
    assert notes[4].time == 4 * midi_io.TICKS_PER_BEAT


def test_eighth_note_meter_uses_shorter_beats(tmp_path):
    chorale = cg.generate_chorale("G", "6/8", 2, seed=5)
    mid = midi_io.create_midi_file(chorale, 100, tmp_path / "e.mid")
    offs = [msg for msg in mid.tracks[4] if msg.type == "note_off"]
    assert all(msg.time == midi_io.TICKS_PER_BEAT // 2 for msg in offs)


def test_program_override(chorale, tmp_path):
    mid = midi_io.create_midi_file(chorale, 90, tmp_path / "p.mid", program=19)
    programs = [msg.program for track in mid.tracks[1:] for msg in track if msg.type == "program_change"]
    assert programs == [19, 19, 19, 19]


@pytest.mark.parametrize("bpm", [0, -10])
def test_invalid_bpm(chorale, tmp_path, bpm):
    with pytest.raises(ValueError):
        midi_io.create_midi_file(chorale, bpm, tmp_path / "bad.mid")


def test_invalid_program(chorale, tmp_path):
    with pytest.raises(ValueError):
        midi_io.create_midi_file(chorale, 90, tmp_path / "bad.mid", program=128)
