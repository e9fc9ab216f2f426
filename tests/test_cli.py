"""Tests for the command line interface."""

import importlib
import json
import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

cli = importlib.import_module("chorale_generator.cli")


@pytest.fixture
def run(monkeypatch, tmp_path):
    """Run the CLI with ``args`` and an isolated settings file."""

    settings_file = tmp_path / "settings.json"

    def _run(*args):
        argv = ["chorale-generator", "--settings-file", str(settings_file), *args]
        monkeypatch.setattr(sys, "argv", argv)
        cli.run_cli()

    _run.settings_file = settings_file
    return _run


def test_prints_progression_and_measures(run, capsys):
    run("--key", "C", "--timesig", "4/4", "--measures", "4", "--complexity", "0", "--seed", "3")
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0].startswith("Progression: I - ")
    assert lines[0].endswith("V - I")
    assert len(lines) == 5
    assert lines[1].startswith("M1")
    assert "S:" in lines[1] and "B:" in lines[1]


def test_seed_makes_output_repeatable(run, capsys):
    run("--key", "Gm", "--measures", "6", "--seed", "8")
    first = capsys.readouterr().out
    run("--key", "Gm", "--measures", "6", "--seed", "8")
    assert capsys.readouterr().out == first


def test_writes_midi(run, tmp_path):
    out = tmp_path / "out" / "song.mid"
    run("--key", "D", "--timesig", "3/4", "--measures", "3", "--seed", "1", "--output", str(out))
    assert out.exists()


def test_progression_sets_measure_count(run, capsys):
    run("--key", "C", "--progression", "I,vi,IV,V7,I", "--seed", "2")
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "Progression: I - vi - IV - V7 - I"
    assert len(lines) == 6


def test_list_keys(run, capsys):
    run("--list-keys")
    keys = capsys.readouterr().out.split()
    assert "C" in keys and "F#m" in keys


def test_save_settings_and_reuse_defaults(run, capsys):
    run("--key", "Bb", "--timesig", "2/2", "--measures", "3", "--complexity", "2", "--save-settings", "--seed", "4")
    saved = json.loads(run.settings_file.read_text(encoding="utf-8"))
    assert saved["key"] == "Bb"
    assert saved["timesig"] == "2/2"
    assert saved["measures"] == 3
    assert saved["harmonic_complexity"] == 2

    capsys.readouterr()
    run("--seed", "4")
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 4


@pytest.mark.parametrize(
    "args, message",
    [
        (("--key", "H"), "Invalid key"),
        (("--timesig", "4/5"), "Beat value"),
        (("--measures", "0"), "positive integer"),
        (("--complexity", "11"), "harmonic_complexity"),
        (("--bpm", "0"), "BPM"),
        (("--progression", "I,Q,I"), "Invalid Roman numeral"),
        (("--progression", "I,V,I", "--measures", "4"), "Progression has 3 chords"),
        (("--difficulty", "nan"), "difficulty must be finite"),
    ],
)
def test_invalid_arguments_exit_with_error(run, caplog, args, message):
    caplog.set_level(logging.ERROR)
    with pytest.raises(SystemExit) as exc:
        run(*args)
    assert exc.value.code == 1
    assert message in caplog.text


def test_unwritable_output_logged(run, caplog, tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    caplog.set_level(logging.ERROR)
    with pytest.raises(SystemExit) as exc:
        run("--measures", "2", "--seed", "1", "--output", str(blocker / "song.mid"))
    assert exc.value.code == 1
    assert "Could not write MIDI file" in caplog.text


def test_main_configures_logging(monkeypatch):
    calls = []
    monkeypatch.setattr(cli.logging, "basicConfig", lambda **kw: calls.append(kw))
    monkeypatch.setattr(cli, "run_cli", lambda: calls.append("run"))
    cli.main()
    assert calls[0]["level"] == logging.INFO
    assert calls[1] == "run"


def test_difficulty_overrides_sliders(run):
    run(
        "--difficulty", "10", "--complexity", "1", "--smoothness", "9",
        "--measures", "3", "--seed", "2", "--save-settings",
    )
    saved = json.loads(run.settings_file.read_text(encoding="utf-8"))
    assert saved["harmonic_complexity"] == 8
    assert saved["melodic_smoothness"] == 0
    assert saved["dissonance_strictness"] == 2


def test_easy_difficulty_keeps_basic_vocabulary(run, capsys):
    run("--key", "C", "--difficulty", "0", "--measures", "6", "--seed", "5")
    progression = capsys.readouterr().out.splitlines()[0]
    numerals = progression[len("Progression: "):].split(" - ")
    assert set(numerals) <= {"I", "ii", "IV", "V", "vi"}
