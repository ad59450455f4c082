"""Prompt composition: turn resolved section values into one text document.

The composer walks a fixed order of blocks and emits each one that has a
value, skipping absent blocks entirely (no heading, no placeholder).

Block Order
-----------
1. ``Name``: the entity's name
2. ``Bio``: the entity's biography
3. every section of the catalog, in catalog order, resolved through the
   item value, entity default and global default tiers
4. ``Additional Information``: the item's free-form block (no defaults)

Block Format
------------
Regular blocks are a title line followed by the text::

    Outfit:
    hoodie, jeans, sneakers

The negative-prompt section is a single line.  ``"Negative prompt: "`` is
prepended unless the text already starts with that phrase (any case)::

    Negative prompt: no text, no watermark

Blocks are joined with exactly one blank line and the output has no
trailing newline.  Composition is a pure function of its inputs: the same
entity, item and defaults always produce byte-identical text, which other
features rely on for duplicate detection.

Usage
-----
::

    text = compose(entity, item, defaults.global_defaults)
"""

from __future__ import annotations

from collections.abc import Mapping

from .models import EntityProfile, PromptItem
from .resolver import resolve_section
from .sections import FULL_SECTIONS, NEGATIVE_KIND, SectionCatalog
from .text import non_empty

NEGATIVE_PREFIX = "Negative prompt: "


def _block(title: str, text: str | None) -> str | None:
    """Format a titled block, or ``None`` when ``text`` is blank."""
    value = non_empty(text)
    if value is None:
        return None
    return f"{title}:\n{value}"


def format_negative(text: str) -> str:
    """Prefix negative text unless it already carries the prefix."""
    if text.lower().startswith("negative prompt"):
        return text
    return f"{NEGATIVE_PREFIX}{text}"


def compose(
    entity: EntityProfile | None,
    item: PromptItem | None,
    global_defaults: Mapping[str, str] | None,
    catalog: SectionCatalog = FULL_SECTIONS,
) -> str:
    """Compose the final prompt text for one entity and item.

    Args:
        entity: Entity context supplying name, bio and entity defaults.
            ``None`` composes without entity-level blocks.
        item: The item whose section values are composed.  ``None`` composes
            from defaults only.
        global_defaults: Application-wide ``kind -> text`` defaults.
        catalog: Section list and order to compose.

    Returns:
        The composed prompt, or an empty string when every block is absent.
    """
    blocks: list[str] = []
    entity_defaults = entity.defaults if entity is not None else None

    # --- Entity identity -----------------------------------------------------
    if entity is not None:
        for title, text in (("Name", entity.name), ("Bio", entity.bio)):
            block = _block(title, text)
            if block:
                blocks.append(block)

    # --- Sections ------------------------------------------------------------
    for section in catalog:
        value = resolve_section(section.key, item, entity_defaults, global_defaults)
        if value is None:
            continue
        if section.key == NEGATIVE_KIND:
            blocks.append(format_negative(value))
        else:
            blocks.append(f"{section.title}:\n{value}")

    # --- Additional information (item only) -----------------------------------
    if item is not None:
        block = _block("Additional Information", item.additional_info)
        if block:
            blocks.append(block)

    return "\n\n".join(blocks)
