"""JSON persistence helpers for the Chancery configuration state.

The engine itself is storage-agnostic; this module is the file-backed
collaborator that round-trips its logical shape to disk.  Three files live
in the data directory:

- ``presets.json``: list of ``{id, kind, name, text}`` records
- ``settings.json``: ``{"global_defaults": {kind: text}, "global_theme_id": ...,
  "default_generator": ...}``
- ``entities.json``: list of entity objects, each carrying its own
  ``defaults`` map and ``items``

Loading is intentionally forgiving:

- a missing or unparsable file yields the empty default
- a file of the wrong top-level type yields the empty default
- individual malformed records are skipped with a warning

Blank default values are dropped on both load and save, so "absent" is never
written as a present key.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .models import EntityProfile
from .presets import PresetLibrary
from .text import clean_text_map

logger = logging.getLogger(__name__)

PRESETS_FILE = "presets.json"
SETTINGS_FILE = "settings.json"
ENTITIES_FILE = "entities.json"


def _load_json(path: Path, default: Any) -> Any:
    """Load a JSON file, returning *default* when it is missing or invalid."""
    if not path.exists():
        return default
    try:
        with open(path, encoding="utf-8") as handle:
            return json.load(handle)
    except (OSError, ValueError) as e:
        logger.error(f"Could not read {path}: {e}")
        return default


def _save_json(path: Path, data: Any) -> None:
    """Persist a JSON-serialisable object with 2-space indentation."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(data, handle, indent=2)


def load_presets(data_dir: Path) -> PresetLibrary:
    """Load the preset library from ``presets.json``."""
    records = _load_json(data_dir / PRESETS_FILE, [])
    if not isinstance(records, list):
        logger.warning(f"Ignoring {PRESETS_FILE}: expected a list")
        records = []
    return PresetLibrary.from_records(record for record in records if isinstance(record, dict))


def save_presets(data_dir: Path, library: PresetLibrary) -> None:
    _save_json(data_dir / PRESETS_FILE, library.to_records())


def load_settings(data_dir: Path) -> dict:
    """Load global settings.

    Returns:
        Dictionary with ``global_defaults`` (always a dict) and, when stored,
        ``global_theme_id`` and ``default_generator``.
    """
    raw = _load_json(data_dir / SETTINGS_FILE, {})
    if not isinstance(raw, dict):
        logger.warning(f"Ignoring {SETTINGS_FILE}: expected an object")
        raw = {}

    defaults = raw.get("global_defaults")
    if isinstance(defaults, dict):
        for kind, value in defaults.items():
            if value is not None and not isinstance(value, str):
                logger.warning(f"Skipping non-text global default for {kind}: {value!r}")
    settings: dict[str, Any] = {
        "global_defaults": clean_text_map(defaults) if isinstance(defaults, dict) else {},
    }
    for key in ("global_theme_id", "default_generator"):
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            settings[key] = value.strip()
    return settings


def save_settings(
    data_dir: Path,
    *,
    global_defaults: dict[str, str],
    global_theme_id: str,
    default_generator: str,
) -> None:
    _save_json(
        data_dir / SETTINGS_FILE,
        {
            "global_defaults": clean_text_map(global_defaults),
            "global_theme_id": global_theme_id,
            "default_generator": default_generator,
        },
    )


def load_entities(data_dir: Path) -> list[EntityProfile]:
    """Load entities from ``entities.json``, skipping malformed records."""
    records = _load_json(data_dir / ENTITIES_FILE, [])
    if not isinstance(records, list):
        logger.warning(f"Ignoring {ENTITIES_FILE}: expected a list")
        return []

    entities: list[EntityProfile] = []
    for record in records:
        try:
            entities.append(EntityProfile.model_validate(record))
        except ValidationError as e:
            logger.warning(f"Skipping malformed entity record: {e}")
    return entities


def save_entities(data_dir: Path, entities: list[EntityProfile]) -> None:
    _save_json(data_dir / ENTITIES_FILE, [entity.model_dump() for entity in entities])
