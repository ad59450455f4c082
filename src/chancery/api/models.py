"""Pydantic request and response models for the Chancery API.

These models define the JSON schema for every API endpoint.  FastAPI uses
them for automatic request validation, serialisation, and OpenAPI
documentation generation.

Models
------
PresetUpsertRequest
    Payload for ``POST /api/presets``: create or update a preset by name.
SaveSectionPresetRequest
    Payload for saving an item's current section text as a preset.
DefaultValueRequest
    Payload for setting or clearing a global or entity default.
EntityCreateRequest / EntityUpdateRequest
    Entity creation and partial update.
ItemCreateRequest / ItemDuplicateRequest
    Item creation and duplication.
SectionTextRequest / AdditionalInfoRequest / ApplyPresetRequest
    Item edits.
ThemeSelectionRequest / GeneratorRequest
    Theme and generator selection at global or entity scope.
BindingResponse
    Section text plus its preset binding, returned after every section edit.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from chancery.core.binding import BindingState, Bound


class PresetUpsertRequest(BaseModel):
    """Request body for ``POST /api/presets``.

    Attributes:
        kind: Section kind the preset belongs to.
        name: Display name, matched case-insensitively within ``kind``.
        text: Preset content.  Blank text makes the save a no-op.
    """

    kind: str = Field(..., min_length=1, description="Section kind (e.g. 'outfit').")
    name: str = Field(..., description="Preset display name.")
    text: str = Field(..., description="Preset text.")


class SaveSectionPresetRequest(BaseModel):
    """Save an item's current section text under ``name``."""

    name: str = Field(..., description="Preset display name.")


class DefaultValueRequest(BaseModel):
    """Set a default value; blank or null text clears it."""

    text: str | None = Field(default=None, description="Default text, or null to clear.")


class EntityCreateRequest(BaseModel):
    name: str = Field(..., description="Entity display name.")
    bio: str = Field(default="", description="Biography, composed as the Bio block.")
    notes: str = Field(default="", description="Private notes, never composed.")


class EntityUpdateRequest(BaseModel):
    """Partial entity update; omitted fields are left unchanged."""

    name: str | None = None
    bio: str | None = None
    notes: str | None = None


class ItemCreateRequest(BaseModel):
    title: str = Field(default="", description="Item display title.")
    sections: dict[str, str] = Field(
        default_factory=dict,
        description="Initial section text keyed by section kind.",
    )
    additional_info: str = Field(default="", description="Free-form block composed last.")


class ItemDuplicateRequest(BaseModel):
    title: str | None = Field(
        default=None,
        description="Title for the copy; blank uses '<title> (Copy)'.",
    )


class SectionTextRequest(BaseModel):
    text: str | None = Field(default=None, description="Section text, or null to clear.")


class AdditionalInfoRequest(BaseModel):
    text: str | None = Field(default=None, description="Additional information text.")


class ApplyPresetRequest(BaseModel):
    preset_id: str = Field(..., description="Identifier of the preset to apply.")


class ThemeSelectionRequest(BaseModel):
    """Select a theme.

    Attributes:
        theme_id: Theme identifier.  For entity scope, ``None`` clears the
            override so the entity inherits the global theme.
    """

    theme_id: str | None = Field(default=None, description="Theme identifier.")


class GeneratorRequest(BaseModel):
    slug: str | None = Field(
        default=None,
        description="Generator slug (e.g. 'ai-artgen'); blank clears the choice.",
    )


class BindingResponse(BaseModel):
    """One section's stored text and its current preset binding.

    Attributes:
        kind: Section kind.
        text: Stored section text (empty when absent).
        bound: Whether the text matches a preset of the same kind.
        preset_name: Name of the bound preset, if any.
    """

    kind: str
    text: str
    bound: bool
    preset_name: str | None = None

    @classmethod
    def from_state(cls, kind: str, text: str, state: BindingState) -> BindingResponse:
        if isinstance(state, Bound):
            return cls(kind=kind, text=text, bound=True, preset_name=state.preset_name)
        return cls(kind=kind, text=text, bound=False)
