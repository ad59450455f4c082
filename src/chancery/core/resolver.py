"""Tiered override resolution.

Several settings in Chancery follow the same priority chain: an explicit
choice on the item (or entity) wins, otherwise a scoped default applies,
otherwise a global default, otherwise nothing.  Rather than repeating the
chain per concern, this module models it once as :func:`resolve` and
derives the concrete instantiations from it:

=====================  ==================  ================  =================
Concern                Explicit tier       Scoped tier       Global tier
=====================  ==================  ================  =================
Prompt section value   item section text   entity default    global default
Theme selection        entity theme id     (none)            global theme id
Generator selection    entity generator    (none)            global generator
=====================  ==================  ================  =================

Every function here is pure: it reads its arguments and returns a value, so
hosts may call it for "preview effective value" use cases as often as they
like.  Nothing is cached; callers re-run resolution whenever any tier
changes.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping

from .models import PromptItem
from .text import non_empty


def resolve(*tiers: str | None) -> str | None:
    """Return the first tier that is non-empty after trimming.

    Args:
        *tiers: Candidate values in priority order.  ``None`` and
            whitespace-only strings count as absent.

    Returns:
        The trimmed winning value, or ``None`` if every tier is absent.

    Examples:
        >>> resolve("", "  armor ", "casual")
        'armor'
        >>> resolve(None, "   ") is None
        True
    """
    for tier in tiers:
        value = non_empty(tier)
        if value is not None:
            return value
    return None


def resolve_section(
    kind: str,
    item: PromptItem | None,
    entity_defaults: Mapping[str, str] | None,
    global_defaults: Mapping[str, str] | None,
) -> str | None:
    """Resolve the effective text for one section of one item.

    Args:
        kind: Section key.
        item: The item being composed, or ``None`` to preview what a blank
            field would default to.
        entity_defaults: The owning entity's defaults.
        global_defaults: Application-wide defaults.

    Returns:
        Item text, else entity default, else global default, trimmed; or
        ``None`` when no tier has a value.
    """
    explicit = item.sections.get(kind) if item is not None else None
    scoped = (entity_defaults or {}).get(kind)
    fallback = (global_defaults or {}).get(kind)
    return resolve(explicit, scoped, fallback)


def resolve_theme_id(
    override_id: str | None,
    global_id: str | None,
    known_ids: Collection[str],
    fallback_id: str,
) -> str:
    """Pick the theme id that should be applied.

    Unknown ids are skipped rather than rejected, so a stale override left
    behind after a custom theme file was deleted degrades to the global
    choice and, past that, to the built-in fallback.

    Args:
        override_id: Entity-level theme id (``None`` means inherit).
        global_id: Application-wide theme id.
        known_ids: Ids of every theme currently available.
        fallback_id: Built-in theme id used as the last resort.

    Returns:
        The winning theme id.  Never raises.
    """
    override = non_empty(override_id)
    if override is not None and override in known_ids:
        return override
    selected = non_empty(global_id)
    if selected is not None and selected in known_ids:
        return selected
    return fallback_id


def resolve_generator(
    entity_generator: str | None,
    global_generator: str | None,
    fallback_generator: str,
) -> str:
    """Pick the external generator slug for an entity."""
    return resolve(entity_generator, global_generator) or fallback_generator
