"""Command line interface for Chorale Generator.

Modification summary
--------------------
* Defaults for every generation option come from the JSON settings file so a
  bare ``chorale-generator`` repeats the last run's configuration.
* ``--progression`` voices a user supplied Roman-numeral sequence instead of
  a generated one.
* ``--difficulty`` overrides the three style sliders with one value.
* Invalid arguments are logged at ``ERROR`` and exit with status ``1``
  before any generation work starts.
* ``OSError`` while writing the MIDI file is logged rather than raised.

The :func:`run_cli` function parses the arguments, generates the chorale and
prints the progression followed by one line of note names per measure.
:func:`main` configures logging first and is the console script entry point.

Example
-------
Running ``python -m chorale_generator --key Dm --timesig 3/4 --measures 6 \
    --complexity 7 --seed 4 --output out.mid`` prints the progression and
voicings of a six measure chorale in D minor and saves it to ``out.mid``.
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path
from typing import List, Optional

from .generation import ChoraleGenerator
from .models import Chorale, GenerationSettings
from .note_utils import format_voicing
from .settings import DEFAULT_SETTINGS_FILE, load_settings, save_settings
from .theory import STANDARD_KEYS, get_key
from .utils import parse_progression, validate_measures, validate_time_signature

__all__ = ["run_cli", "main", "build_parser", "format_chorale"]

DEFAULT_KEY = "C"
DEFAULT_TIMESIG = "4/4"
DEFAULT_MEASURES = 8
DEFAULT_BPM = 80
DEFAULT_SLIDER = 5


def build_parser(defaults: Optional[dict] = None) -> argparse.ArgumentParser:
    """Return the argument parser with defaults taken from ``defaults``."""

    saved = defaults or {}
    parser = argparse.ArgumentParser(
        prog="chorale-generator",
        description="Generate a four-part SATB chorale and optionally save it as MIDI.",
    )
    parser.add_argument("--list-keys", action="store_true", help="List all supported keys and exit")
    parser.add_argument("--key", type=str, default=saved.get("key", DEFAULT_KEY), help="Key such as C, Eb or F#m.")
    parser.add_argument(
        "--timesig",
        type=str,
        default=saved.get("timesig", DEFAULT_TIMESIG),
        help="Meter as beats/beat-value (beat value one of 2, 4, 8 or 16).",
    )
    parser.add_argument("--measures", type=int, help="Number of measures (default: progression length or saved value).")
    parser.add_argument("--progression", type=str, help="Comma-separated Roman numerals, e.g. I,IV,V7,I.")
    parser.add_argument(
        "--complexity",
        type=int,
        default=saved.get("harmonic_complexity", DEFAULT_SLIDER),
        help="Harmonic complexity 0-10.",
    )
    parser.add_argument(
        "--smoothness",
        type=int,
        default=saved.get("melodic_smoothness", DEFAULT_SLIDER),
        help="Melodic smoothness 0-10.",
    )
    parser.add_argument(
        "--strictness",
        type=int,
        default=saved.get("dissonance_strictness", DEFAULT_SLIDER),
        help="Dissonance strictness 0-10; voice-leading checks run above 3.",
    )
    parser.add_argument(
        "--difficulty",
        type=float,
        help="Single 0-10 difficulty that replaces the three style sliders.",
    )
    parser.add_argument("--seed", type=int, help="Random seed for reproducible output")
    parser.add_argument("--bpm", type=int, default=saved.get("bpm", DEFAULT_BPM), help="Tempo for MIDI output.")
    parser.add_argument("--output", type=str, help="Output MIDI file path.")
    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Remember these options as the defaults for future runs",
    )
    parser.add_argument(
        "--settings-file",
        type=str,
        help="Path to the JSON settings file holding saved defaults",
    )
    return parser


def format_chorale(chorale: Chorale) -> List[str]:
    """Return printable lines: the progression then one line per measure."""

    lines = ["Progression: " + " - ".join(chorale.progression)]
    for index, (roman, voicing) in enumerate(zip(chorale.progression, chorale.voicings)):
        lines.append(f"M{index + 1:<3} {roman:<6} {format_voicing(voicing, chorale.key)}")
    return lines


def _settings_path(argv: List[str]) -> Path:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--settings-file", type=str)
    pre_args, _ = pre_parser.parse_known_args(argv)
    if pre_args.settings_file:
        return Path(pre_args.settings_file).expanduser()
    return DEFAULT_SETTINGS_FILE


def run_cli() -> None:
    """Parse CLI arguments, generate a chorale and print or save it."""

    argv = sys.argv[1:]
    if "--list-keys" in argv:
        print("\n".join(STANDARD_KEYS))
        return

    settings_path = _settings_path(argv)
    args = build_parser(load_settings(settings_path)).parse_args(argv)

    try:
        key = get_key(args.key)
    except ValueError:
        logging.error(f"Invalid key provided: {args.key}")
        sys.exit(1)

    try:
        meter = validate_time_signature(args.timesig)
    except ValueError as exc:
        logging.error(str(exc))
        sys.exit(1)

    try:
        if args.difficulty is not None:
            settings = GenerationSettings.from_difficulty(args.difficulty)
        else:
            settings = GenerationSettings(args.complexity, args.smoothness, args.strictness)
    except ValueError as exc:
        logging.error(str(exc))
        sys.exit(1)

    if args.bpm <= 0:
        logging.error("BPM must be a positive integer.")
        sys.exit(1)

    progression = None
    if args.progression:
        try:
            progression = parse_progression(args.progression)
        except ValueError as exc:
            logging.error(str(exc))
            sys.exit(1)

    measures = args.measures
    if measures is None:
        if progression is not None:
            measures = len(progression)
        else:
            measures = load_settings(settings_path).get("measures", DEFAULT_MEASURES)
    try:
        validate_measures(measures)
    except ValueError as exc:
        logging.error(str(exc))
        sys.exit(1)
    if progression is not None and len(progression) != measures:
        logging.error(
            f"Progression has {len(progression)} chords but {measures} measures were requested."
        )
        sys.exit(1)

    if args.seed is not None:
        logging.info("Using random seed %d", args.seed)
    rng = random.Random(args.seed)

    chorale = ChoraleGenerator(rng).generate(key, meter, measures, settings, progression)
    for line in format_chorale(chorale):
        print(line)

    if args.output:
        from .midi_io import create_midi_file

        try:
            create_midi_file(chorale, args.bpm, args.output)
        except OSError as exc:
            logging.error("Could not write MIDI file: %s", exc)
            sys.exit(1)

    if args.save_settings:
        save_settings(
            {
                "key": key.name,
                "timesig": f"{meter[0]}/{meter[1]}",
                "measures": measures,
                "harmonic_complexity": settings.harmonic_complexity,
                "melodic_smoothness": settings.melodic_smoothness,
                "dissonance_strictness": settings.dissonance_strictness,
                "bpm": args.bpm,
            },
            settings_path,
        )
    logging.info("Chorale generation complete.")


def main() -> None:
    """Console script entry point."""

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    run_cli()


if __name__ == "__main__":
    main()
