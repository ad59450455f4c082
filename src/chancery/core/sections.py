"""Section catalog: the ordered list of composable prompt sections.

A section kind is a plain string key (``"outfit"``, ``"lighting"``, ...).
Which kinds exist, the order they are composed in, and their human-readable
titles are configuration data held by a :class:`SectionCatalog` rather than a
hard-coded enumeration, so that both application variants can be served:

- ``FULL_SECTIONS`` includes a physical-description section
- ``COMPACT_SECTIONS`` omits it

The negative-prompt kind is special-cased by the composer, which looks it up
through :data:`NEGATIVE_KIND`.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from pydantic import BaseModel, ConfigDict, Field

NEGATIVE_KIND = "negative"


class SectionDefinition(BaseModel):
    """One composable section kind.

    Attributes:
        key: Stable identifier used as a map key everywhere.
        title: Human label used as the block heading in composed output.
        placeholder: Hint text shown by hosts for an empty field.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    placeholder: str = ""


class SectionCatalog:
    """Ordered, immutable collection of section definitions."""

    def __init__(self, definitions: Iterable[SectionDefinition]):
        self._definitions: tuple[SectionDefinition, ...] = tuple(definitions)
        self._by_key = {definition.key: definition for definition in self._definitions}
        if len(self._by_key) != len(self._definitions):
            raise ValueError("Section keys must be unique")

    def __iter__(self) -> Iterator[SectionDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def keys(self) -> list[str]:
        """Return section keys in composition order."""
        return [definition.key for definition in self._definitions]

    def get(self, key: str) -> SectionDefinition | None:
        return self._by_key.get(key)

    def title(self, key: str) -> str:
        """Return the display title for ``key``, or the key itself if unknown."""
        definition = self._by_key.get(key)
        return definition.title if definition else key


_PHYSICAL = SectionDefinition(
    key="physicalDescription",
    title="Physical Description",
    placeholder="Describe physical features...",
)

_SHARED = (
    SectionDefinition(
        key="outfit", title="Outfit", placeholder="Describe clothing and accessories..."
    ),
    SectionDefinition(key="pose", title="Pose", placeholder="Describe pose and expression..."),
    SectionDefinition(
        key="environment",
        title="Environment",
        placeholder="Describe the setting and background...",
    ),
    SectionDefinition(
        key="lighting", title="Lighting", placeholder="Describe lighting conditions..."
    ),
    SectionDefinition(
        key="style", title="Style Modifiers", placeholder="Add artistic style modifiers..."
    ),
    SectionDefinition(
        key="technical", title="Technical Modifiers", placeholder="Add technical parameters..."
    ),
    SectionDefinition(
        key=NEGATIVE_KIND, title="Negative Prompt", placeholder="Elements to exclude..."
    ),
)

FULL_SECTIONS = SectionCatalog((_PHYSICAL, *_SHARED))
COMPACT_SECTIONS = SectionCatalog(_SHARED)

CATALOGS: dict[str, SectionCatalog] = {
    "full": FULL_SECTIONS,
    "compact": COMPACT_SECTIONS,
}


def get_catalog(name: str) -> SectionCatalog:
    """Look up a built-in catalog by its configuration name.

    Unknown names fall back to the full catalog.
    """
    return CATALOGS.get(name, FULL_SECTIONS)
