"""Preset library: named, reusable text snippets grouped by section kind.

Presets are created by an explicit save action, either from the global
defaults screen or from a section's "save as preset" action.  A save that
targets an existing ``(kind, name)`` pair, compared case-insensitively,
updates that preset's text in place instead of creating a duplicate, so no
two presets of one kind ever share a case-insensitive name.

Saving blank text (or a blank name) is a silent no-op.  Hosts are expected
to disable the save affordance in that case; the library only guards
against junk presets and never raises.

Persisted Shape
---------------
The library serialises as a list of ``{id, kind, name, text}`` records in
insertion order::

    [
        {"id": "7d0c...", "kind": "outfit", "name": "Casual Outfit",
         "text": "hoodie, jeans, sneakers"},
        ...
    ]
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from pydantic import BaseModel, Field, ValidationError, field_validator

from .models import new_id
from .text import non_empty

logger = logging.getLogger(__name__)


class Preset(BaseModel):
    """A reusable preset scoped to one section kind."""

    id: str = Field(default_factory=new_id)
    kind: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)

    @field_validator("kind", "name", "text")
    @classmethod
    def _trimmed_non_blank(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("must not be blank")
        return trimmed


class PresetLibrary:
    """Keyed collection of presets, ordered by insertion.

    Attributes
    ----------
    _presets : list[Preset]
        All presets across every section kind, in insertion order

    Notes
    -----
    - Filtering by kind preserves insertion order, which is the order hosts
      show in "apply preset" menus and the order binding detection scans
    - Thread-safety is not provided; the host serialises writes

    Examples
    --------
        >>> library = PresetLibrary()
        >>> library.upsert("outfit", "Foo", "bar").text
        'bar'
        >>> library.upsert("outfit", "foo", "baz").text
        'baz'
        >>> [p.name for p in library.list_by_kind("outfit")]
        ['Foo']
    """

    def __init__(self, presets: Iterable[Preset] | None = None):
        self._presets: list[Preset] = list(presets or [])

    def __iter__(self) -> Iterator[Preset]:
        return iter(list(self._presets))

    def __len__(self) -> int:
        return len(self._presets)

    def list_by_kind(self, kind: str) -> list[Preset]:
        """Return presets of ``kind`` in insertion order."""
        return [preset for preset in self._presets if preset.kind == kind]

    def get(self, preset_id: str) -> Preset | None:
        return next((preset for preset in self._presets if preset.id == preset_id), None)

    def find(self, kind: str, name: str) -> Preset | None:
        """Find a preset of ``kind`` by case-insensitive name."""
        folded = name.strip().casefold()
        return next(
            (
                preset
                for preset in self._presets
                if preset.kind == kind and preset.name.casefold() == folded
            ),
            None,
        )

    def upsert(self, kind: str, name: str, text: str) -> Preset | None:
        """Create or update a preset.

        Args:
            kind: Section kind the preset belongs to.
            name: Display name; matched case-insensitively within ``kind``.
            text: Preset content, stored trimmed.

        Returns:
            The stored preset, or ``None`` when the save was ignored because
            the name or text was blank.
        """
        trimmed_text = non_empty(text)
        trimmed_name = non_empty(name)
        if trimmed_text is None or trimmed_name is None:
            logger.warning(f"Ignored preset save with empty name or text (kind={kind})")
            return None

        existing = self.find(kind, trimmed_name)
        if existing is not None:
            existing.text = trimmed_text
            logger.debug(f"Updated preset '{existing.name}' ({kind})")
            return existing

        preset = Preset(kind=kind, name=trimmed_name, text=trimmed_text)
        self._presets.append(preset)
        logger.debug(f"Created preset '{trimmed_name}' ({kind})")
        return preset

    def remove(self, preset_id: str) -> bool:
        """Remove a preset by id.

        Returns:
            True if a preset was removed, False if the id was unknown.
        """
        for index, preset in enumerate(self._presets):
            if preset.id == preset_id:
                del self._presets[index]
                logger.debug(f"Removed preset '{preset.name}' ({preset.kind})")
                return True

        logger.warning(f"Attempted to remove unknown preset: {preset_id}")
        return False

    def to_records(self) -> list[dict]:
        """Serialise to a list of ``{id, kind, name, text}`` records."""
        return [preset.model_dump() for preset in self._presets]

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> PresetLibrary:
        """Rebuild a library from persisted records.

        Malformed records (missing fields, blank text) are skipped with a
        warning rather than failing the whole load.  So are records that
        repeat an id, or a ``(kind, name)`` pair under case-insensitive
        comparison; the first occurrence wins.
        """
        presets: list[Preset] = []
        seen_ids: set[str] = set()
        seen_names: set[tuple[str, str]] = set()
        for record in records:
            try:
                preset = Preset.model_validate(record)
            except ValidationError as e:
                logger.warning(f"Skipping malformed preset record {record!r}: {e}")
                continue

            name_key = (preset.kind, preset.name.casefold())
            if preset.id in seen_ids or name_key in seen_names:
                logger.warning(
                    f"Skipping duplicate preset '{preset.name}' ({preset.kind}, id={preset.id})"
                )
                continue
            seen_ids.add(preset.id)
            seen_names.add(name_key)
            presets.append(preset)
        return cls(presets)


SAMPLE_PRESETS: list[tuple[str, str, str]] = [
    ("outfit", "Casual Outfit", "hoodie, jeans, sneakers, relaxed casual style"),
    ("outfit", "Fantasy Armor", "ornate plate armor, engraved runes, flowing cape"),
    ("pose", "Hero Pose", "standing tall, chest out, confident stance, looking at viewer"),
    ("pose", "Relaxed Sitting", "sitting cross-legged, relaxed shoulders, soft expression"),
    ("environment", "Cozy Room", "warm cozy bedroom, soft blankets, fairy lights, bookshelves"),
    ("environment", "Sci-Fi Lab", "sleek futuristic lab, holographic screens, glowing consoles"),
    ("lighting", "Golden Hour", "golden hour lighting, warm amber tones, long soft shadows"),
    ("lighting", "Dramatic Rim", "strong rim light from behind, deep shadows, high contrast"),
    ("style", "Digital Painting", "digital painting, visible brush strokes, rich colors"),
    ("style", "Anime Cel-Shaded", "anime style, crisp lineart, cel-shaded coloring"),
    ("technical", "Ultra HD", "8k resolution, ultra-detailed, sharp focus"),
    ("technical", "Portrait Depth", "shallow depth of field, creamy bokeh, subject in focus"),
    ("negative", "Clean Image", "no text, no watermark, no extra limbs, no distortions"),
    ("negative", "Simple Background", "no cluttered background, no busy patterns"),
]


def seed_sample_presets(library: PresetLibrary) -> None:
    """Add the sample presets to ``library``."""
    for kind, name, text in SAMPLE_PRESETS:
        library.upsert(kind, name, text)
    logger.info(f"Seeded {len(SAMPLE_PRESETS)} sample presets")
