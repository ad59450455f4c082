"""Entity and item models for the Chancery prompt engine.

An **entity** (e.g. a character or scene profile) owns a set of entity-level
section defaults, optional theme and generator overrides, and a list of
**items**.  An item is one composable prompt document holding, per section
kind, an optional explicit text value and an optional bound-preset name.

Both models are Pydantic models so that they serialise to and from the JSON
store without hand-written codecs.  Blank section text and blank defaults
are never stored as present keys.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field, field_validator

from .text import drop_blank_entries, non_empty


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return str(uuid.uuid4())


class PromptItem(BaseModel):
    """A single composable prompt document.

    Attributes:
        id: Opaque unique identifier.
        title: Display title.
        sections: Explicit section text keyed by section kind.
        preset_names: Advisory bound-preset name per section kind.  Only
            meaningful while the section text still equals that preset's
            text; recomputed by :class:`~chancery.core.binding.PresetBindingTracker`.
        additional_info: Free-form block composed last, without defaults.
    """

    id: str = Field(default_factory=new_id)
    title: str = ""
    sections: dict[str, str] = Field(default_factory=dict)
    preset_names: dict[str, str] = Field(default_factory=dict)
    additional_info: str = ""

    @field_validator("sections", mode="before")
    @classmethod
    def _drop_blank_sections(cls, value):
        return drop_blank_entries(value, trim=False)

    @field_validator("preset_names", mode="before")
    @classmethod
    def _drop_blank_names(cls, value):
        return drop_blank_entries(value, trim=True)

    def section_text(self, kind: str) -> str:
        """Return the raw text of a section, or an empty string."""
        return self.sections.get(kind, "")

    def set_section(self, kind: str, text: str | None) -> None:
        """Store section text; blank text removes the section."""
        if non_empty(text) is None:
            self.sections.pop(kind, None)
        else:
            self.sections[kind] = text

    def has_content(self) -> bool:
        """Whether any section or the additional info holds text."""
        return bool(self.sections) or non_empty(self.additional_info) is not None


class EntityProfile(BaseModel):
    """The owner of entity-level defaults and of items.

    Attributes:
        id: Opaque unique identifier.
        name: Display name, composed as the ``Name`` block.
        bio: Free-form biography, composed as the ``Bio`` block.
        notes: Private notes, never composed.
        defaults: Entity-level section defaults (blank entries dropped).
        theme_id: Theme override; ``None`` inherits the global theme.
        generator: Generator slug override; ``None`` inherits the global one.
        items: Prompt items owned by this entity.
    """

    id: str = Field(default_factory=new_id)
    name: str = ""
    bio: str = ""
    notes: str = ""
    defaults: dict[str, str] = Field(default_factory=dict)
    theme_id: str | None = None
    generator: str | None = None
    items: list[PromptItem] = Field(default_factory=list)

    @field_validator("defaults", mode="before")
    @classmethod
    def _drop_blank_defaults(cls, value):
        return drop_blank_entries(value, trim=True)

    @field_validator("theme_id", "generator", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str):
            return non_empty(value)
        return value

    def get_item(self, item_id: str) -> PromptItem | None:
        return next((item for item in self.items if item.id == item_id), None)

    @property
    def has_custom_defaults(self) -> bool:
        return bool(self.defaults)

    @property
    def has_custom_theme(self) -> bool:
        return self.theme_id is not None
