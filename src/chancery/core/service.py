"""Chancery service: the engine wired together behind one object.

:class:`ChanceryService` owns every piece of configuration state (preset
library, defaults, theme registry, entities and the global generator) and
exposes the editing operations a host performs on them.  It is the single
object the HTTP layer talks to; the pure functions in
:mod:`~chancery.core.resolver` and :mod:`~chancery.core.composer` remain
usable on their own.

Lifecycle
---------
1. ``ChanceryService(config)``: empty state, catalog chosen from config
2. ``load()``: read ``presets.json``, ``settings.json`` and
   ``entities.json``; seed sample data into a brand-new store
3. edit through the service methods
4. ``save()``: write all three files back

Every edit to an item's section text, including programmatic ones (apply
preset, fill from defaults), re-evaluates that section's preset binding
before returning.

Examples
--------
    >>> service = ChanceryService(config)
    >>> service.load()
    >>> entity = service.create_entity("Mira")
    >>> item = service.add_item(entity, "Portrait")
    >>> service.set_section_text(item, "outfit", "hoodie, jeans")
    Unbound()
    >>> print(service.compose(entity, item))
    Name:
    Mira
    ...
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from .binding import BindingState, PresetBindingTracker
from .composer import compose
from .config import ChanceryConfig
from .defaults import SAMPLE_GLOBAL_DEFAULTS, DefaultsStore
from .models import EntityProfile, PromptItem, new_id
from .presets import Preset, PresetLibrary, seed_sample_presets
from .resolver import resolve_generator
from .sections import get_catalog
from .storage import (
    PRESETS_FILE,
    SETTINGS_FILE,
    load_entities,
    load_presets,
    load_settings,
    save_entities,
    save_presets,
    save_settings,
)
from .text import non_empty
from .themes import Theme, ThemeRegistry

logger = logging.getLogger(__name__)

GENERATOR_BASE_URL = "https://perchance.org/"


class ChanceryService:
    """Owns the configuration state and applies edits to it.

    Attributes
    ----------
    config : ChanceryConfig
        Settings the service was built from
    catalog : SectionCatalog
        Sections composed, in order
    presets : PresetLibrary
        All saved presets
    defaults : DefaultsStore
        Global defaults plus the writer for entity defaults
    themes : ThemeRegistry
        Available themes and the global theme choice
    bindings : PresetBindingTracker
        Keeps item preset markers in step with section text
    global_generator : str
        Application-wide generator slug
    """

    def __init__(self, config: ChanceryConfig):
        self.config = config
        self.data_dir = Path(config.data_dir)
        self.catalog = get_catalog(config.section_catalog)
        self.presets = PresetLibrary()
        self.defaults = DefaultsStore()
        self.themes = ThemeRegistry(config.themes_dir, fallback_id=config.default_theme_id)
        self.bindings = PresetBindingTracker(self.presets)
        self.global_generator = config.default_generator
        self._entities: dict[str, EntityProfile] = {}

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Load state from ``data_dir``, seeding sample data if it is new."""
        is_new_store = not (
            (self.data_dir / PRESETS_FILE).exists() or (self.data_dir / SETTINGS_FILE).exists()
        )

        self.presets = load_presets(self.data_dir)
        self.bindings = PresetBindingTracker(self.presets)

        settings = load_settings(self.data_dir)
        self.defaults = DefaultsStore(settings["global_defaults"])
        self.themes.global_theme_id = settings.get("global_theme_id", self.config.default_theme_id)
        self.global_generator = settings.get("default_generator", self.config.default_generator)

        self._entities = {entity.id: entity for entity in load_entities(self.data_dir)}

        if is_new_store and self.config.seed_sample_data:
            self.seed_sample_data()

        logger.info(
            f"Loaded {len(self.presets)} presets and {len(self._entities)} entities "
            f"from {self.data_dir}"
        )

    def save(self) -> None:
        """Write presets, settings and entities to ``data_dir``."""
        save_presets(self.data_dir, self.presets)
        save_settings(
            self.data_dir,
            global_defaults=self.defaults.global_defaults,
            global_theme_id=self.themes.global_theme_id,
            default_generator=self.global_generator,
        )
        save_entities(self.data_dir, self.entities)
        logger.info(f"Saved configuration state to {self.data_dir}")

    def seed_sample_data(self) -> None:
        """Populate sample presets and any missing global defaults."""
        seed_sample_presets(self.presets)
        for kind, text in SAMPLE_GLOBAL_DEFAULTS.items():
            if kind in self.catalog and self.defaults.get_global(kind) is None:
                self.defaults.set_global(kind, text)

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    def list_presets(self, kind: str | None = None) -> list[Preset]:
        if kind is None:
            return list(self.presets)
        return self.presets.list_by_kind(kind)

    def upsert_preset(self, kind: str, name: str, text: str) -> Preset | None:
        return self.presets.upsert(kind, name, text)

    def remove_preset(self, preset_id: str) -> bool:
        return self.presets.remove(preset_id)

    def save_section_as_preset(self, item: PromptItem, kind: str, name: str) -> Preset | None:
        """Save an item's current section text as a preset and bind to it.

        Returns:
            The stored preset, or ``None`` if the section or name was blank.
        """
        preset = self.presets.upsert(kind, name, item.section_text(kind))
        if preset is not None:
            self.bindings.on_text_changed(item, kind)
        return preset

    # ------------------------------------------------------------------
    # Defaults
    # ------------------------------------------------------------------

    def set_global_default(self, kind: str, text: str | None) -> None:
        self.defaults.set_global(kind, text)

    def set_entity_default(self, entity: EntityProfile, kind: str, text: str | None) -> None:
        self.defaults.set_entity(entity, kind, text)

    def preview_effective_value(self, kind: str, entity: EntityProfile | None = None) -> str | None:
        """Return what a blank ``kind`` field would fall back to."""
        return self.defaults.effective_default(kind, entity)

    # ------------------------------------------------------------------
    # Entities and items
    # ------------------------------------------------------------------

    @property
    def entities(self) -> list[EntityProfile]:
        return list(self._entities.values())

    def get_entity(self, entity_id: str) -> EntityProfile | None:
        return self._entities.get(entity_id)

    def create_entity(self, name: str, bio: str = "", notes: str = "") -> EntityProfile:
        entity = EntityProfile(name=name.strip(), bio=bio, notes=notes)
        self._entities[entity.id] = entity
        logger.debug(f"Created entity '{entity.name}' ({entity.id})")
        return entity

    def remove_entity(self, entity_id: str) -> bool:
        entity = self._entities.pop(entity_id, None)
        if entity is None:
            logger.warning(f"Attempted to remove unknown entity: {entity_id}")
            return False
        logger.debug(f"Removed entity '{entity.name}' ({entity_id})")
        return True

    def add_item(
        self,
        entity: EntityProfile,
        title: str = "",
        sections: Mapping[str, str] | None = None,
        additional_info: str = "",
    ) -> PromptItem:
        """Create an item on ``entity`` and compute its initial bindings."""
        item = PromptItem(title=title, sections=dict(sections or {}), additional_info=additional_info)
        self.bindings.resync_item(item, item.sections.keys())
        entity.items.append(item)
        return item

    def remove_item(self, entity: EntityProfile, item_id: str) -> bool:
        item = entity.get_item(item_id)
        if item is None:
            return False
        entity.items.remove(item)
        return True

    def duplicate_item(
        self, entity: EntityProfile, item: PromptItem, title: str | None = None
    ) -> PromptItem:
        """Copy ``item`` (sections, bindings, additional info) under a new id.

        The copy is inserted directly after the original.  A blank ``title``
        becomes ``"<original title> (Copy)"``.
        """
        copy = item.model_copy(
            update={
                "id": new_id(),
                "title": non_empty(title) or f"{item.title} (Copy)",
            },
            deep=True,
        )
        try:
            position = entity.items.index(item) + 1
        except ValueError:
            position = len(entity.items)
        entity.items.insert(position, copy)
        return copy

    # ------------------------------------------------------------------
    # Section editing
    # ------------------------------------------------------------------

    def set_section_text(self, item: PromptItem, kind: str, text: str | None) -> BindingState:
        """Replace one section's text and return its new binding state."""
        item.set_section(kind, text)
        return self.bindings.on_text_changed(item, kind)

    def set_additional_info(self, item: PromptItem, text: str | None) -> None:
        item.additional_info = text or ""

    def apply_preset(self, item: PromptItem, preset_id: str) -> BindingState | None:
        """Copy a preset's text into the matching section of ``item``.

        Returns:
            The new binding state, or ``None`` if the preset is unknown.
        """
        preset = self.presets.get(preset_id)
        if preset is None:
            logger.warning(f"Attempted to apply unknown preset: {preset_id}")
            return None
        return self.set_section_text(item, preset.kind, preset.text)

    def fill_from_defaults(
        self, entity: EntityProfile | None, item: PromptItem
    ) -> dict[str, BindingState]:
        """Overwrite every catalog section with its effective default.

        Sections without any default end up blank.  Additional information
        is left untouched.
        """
        for kind in self.catalog.keys():
            item.set_section(kind, self.defaults.effective_default(kind, entity))
        return self.bindings.resync_item(item, self.catalog.keys())

    def clear_all_sections(self, item: PromptItem) -> None:
        """Blank every section, the additional information and all bindings."""
        item.sections.clear()
        item.preset_names.clear()
        item.additional_info = ""

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def compose(self, entity: EntityProfile | None, item: PromptItem | None) -> str:
        return compose(entity, item, self.defaults.global_defaults, self.catalog)

    # ------------------------------------------------------------------
    # Theme and generator selection
    # ------------------------------------------------------------------

    def resolve_theme(self, entity: EntityProfile | None = None) -> Theme:
        return self.themes.resolve(entity)

    def set_global_theme(self, theme_id: str) -> bool:
        return self.themes.set_global_theme(theme_id)

    def set_entity_theme(self, entity: EntityProfile, theme_id: str | None) -> bool:
        return self.themes.set_entity_theme(entity, theme_id)

    def set_global_generator(self, slug: str | None) -> str:
        """Set the global generator; blank restores the configured default."""
        self.global_generator = non_empty(slug) or self.config.default_generator
        return self.global_generator

    def set_entity_generator(self, entity: EntityProfile, slug: str | None) -> None:
        entity.generator = non_empty(slug)

    def resolve_generator(self, entity: EntityProfile | None = None) -> str:
        return resolve_generator(
            entity.generator if entity is not None else None,
            self.global_generator,
            self.config.fallback_generator,
        )

    def generator_url(self, entity: EntityProfile | None = None) -> str:
        """Return the external generator page for ``entity``."""
        return f"{GENERATOR_BASE_URL}{self.resolve_generator(entity)}"
