"""Default values at two scopes: application-wide and per entity.

Global defaults live in this store; entity defaults live on the owning
:class:`~chancery.core.models.EntityProfile` aggregate but are written only
through :class:`DefaultsStore`, so the "blank removes the key" rule is
enforced in exactly one place.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .models import EntityProfile
from .resolver import resolve
from .text import clean_text_map, non_empty

logger = logging.getLogger(__name__)


class DefaultsStore:
    """Global and entity-level section defaults.

    Blank or whitespace-only values are treated as absent: writing one
    removes the key instead of storing it.
    """

    def __init__(self, global_defaults: Mapping[str, str] | None = None):
        self._global: dict[str, str] = clean_text_map(global_defaults)

    @property
    def global_defaults(self) -> dict[str, str]:
        """Return a copy of the global ``kind -> text`` map."""
        return dict(self._global)

    def get_global(self, kind: str) -> str | None:
        return self._global.get(kind)

    def set_global(self, kind: str, text: str | None) -> None:
        """Set or clear (blank ``text``) one global default."""
        value = non_empty(text)
        if value is None:
            if self._global.pop(kind, None) is not None:
                logger.debug(f"Cleared global default for {kind}")
            return
        self._global[kind] = value
        logger.debug(f"Set global default for {kind}")

    def get_entity(self, entity: EntityProfile, kind: str) -> str | None:
        return entity.defaults.get(kind)

    def set_entity(self, entity: EntityProfile, kind: str, text: str | None) -> None:
        """Set or clear (blank ``text``) one default on ``entity``."""
        value = non_empty(text)
        if value is None:
            if entity.defaults.pop(kind, None) is not None:
                logger.debug(f"Cleared default for {kind} on entity {entity.id}")
            return
        entity.defaults[kind] = value
        logger.debug(f"Set default for {kind} on entity {entity.id}")

    def effective_default(self, kind: str, entity: EntityProfile | None = None) -> str | None:
        """What a blank field of ``kind`` would fall back to.

        Entity default first, then global default.
        """
        scoped = entity.defaults.get(kind) if entity is not None else None
        return resolve(scoped, self._global.get(kind))


SAMPLE_GLOBAL_DEFAULTS: dict[str, str] = {
    "outfit": "casual modern outfit, comfortable and practical",
    "pose": "natural relaxed pose",
    "environment": "simple neutral background",
    "lighting": "soft even lighting, no harsh shadows",
    "style": "high quality digital illustration",
    "technical": "high detail, clean lines, sharp focus",
    "negative": "no text, no watermark, no extra limbs, no distortions",
}
