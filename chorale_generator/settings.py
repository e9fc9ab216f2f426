"""Persistent user settings stored as JSON.

The settings file remembers the values a user last generated with (key, meter,
measure count, sliders and tempo) so the CLI can use them as defaults.  Its
location defaults to ``~/.chorale_generator_settings.json`` and can be moved
with the ``CHORALE_SETTINGS_FILE`` environment variable.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping

from .models import GenerationSettings

__all__ = [
    "DEFAULT_SETTINGS_FILE",
    "SLIDER_FIELDS",
    "load_settings",
    "save_settings",
    "settings_from_mapping",
]

env_path = os.environ.get("CHORALE_SETTINGS_FILE")
if env_path:
    DEFAULT_SETTINGS_FILE = Path(env_path).expanduser()
else:
    DEFAULT_SETTINGS_FILE = Path.home() / ".chorale_generator_settings.json"

# Keys of the settings file that map onto ``GenerationSettings`` fields.
SLIDER_FIELDS = ("harmonic_complexity", "melodic_smoothness", "dissonance_strictness")


def load_settings(path: Path = DEFAULT_SETTINGS_FILE) -> Dict[str, Any]:
    """Load saved user settings from ``path`` if it exists.

    Returns an empty dictionary when the file is missing, unreadable or does
    not hold a JSON object.
    """

    path = Path(path)
    if path.is_file():
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logging.error(f"Could not load settings: {exc}")
            return {}
        if isinstance(data, dict):
            return data
        logging.error(f"Settings file {path} does not contain a JSON object")
    return {}


def save_settings(settings: Mapping[str, Any], path: Path = DEFAULT_SETTINGS_FILE) -> None:
    """Save user ``settings`` to ``path`` as JSON.

    Failing to save is logged and ignored so it never prevents generation.
    """

    try:
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(dict(settings), fh, indent=2)
    except (OSError, TypeError) as exc:
        logging.error(f"Could not save settings: {exc}")


def settings_from_mapping(data: Mapping[str, Any]) -> GenerationSettings:
    """Build :class:`GenerationSettings` from the slider entries of ``data``.

    Missing sliders take their defaults; invalid values raise ``ValueError``.
    """

    values = {name: data[name] for name in SLIDER_FIELDS if name in data}
    return GenerationSettings(**values)
