"""Theme registry and tiered theme selection.

Theme selection follows the same override shape as section values, with one
tier fewer: an entity-level theme id wins when it names a known theme,
otherwise the global theme id, otherwise the built-in fallback.  Resolution
is recomputed on every call from both inputs; nothing is cached against only
one of them.

Turning a winning theme into colours and fonts is a host concern.  The
registry only tracks which themes exist and hands back their raw
:class:`Theme` data.

Theme Files
-----------
Custom themes are JSON files in ``themes_dir``::

    themes/
    ├── cyberwave.json
    └── cottagecore.json

Each file holds one theme object (``id``, ``name``, optional
``description``, ``colors`` and ``typography``).  Files that fail to parse
are skipped with an error log; a file whose id is already registered is
ignored.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from .models import EntityProfile
from .resolver import resolve_theme_id

logger = logging.getLogger(__name__)


class Theme(BaseModel):
    """Raw theme data as loaded from JSON."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    colors: dict[str, str] = Field(default_factory=dict)
    typography: dict[str, Any] = Field(default_factory=dict)


DEFAULT_THEME = Theme(
    id="default",
    name="Default",
    description="Clean system look",
    colors={
        "primary": "#007AFF",
        "secondary": "#5856D6",
        "background": "#FFFFFF",
        "textPrimary": "#000000",
        "textSecondary": "#6B6B6B",
    },
    typography={"fontFamily": "system", "fontWeight": "regular"},
)


class ThemeChoice(BaseModel):
    """The two selection inputs for one entity's theme."""

    global_id: str
    entity_override_id: str | None = None


class ThemeRegistry:
    """Available themes plus the global selection.

    Attributes
    ----------
    global_theme_id : str
        Application-wide theme choice
    fallback_id : str
        Id used when neither the entity nor the global choice is known
    """

    def __init__(
        self,
        themes_dir: Path | None = None,
        *,
        global_theme_id: str | None = None,
        fallback_id: str = DEFAULT_THEME.id,
    ):
        self.themes_dir = Path(themes_dir) if themes_dir else None
        self.fallback_id = fallback_id
        self._themes: dict[str, Theme] = {}
        self.reload()
        self.global_theme_id = global_theme_id or fallback_id

    @property
    def available(self) -> list[Theme]:
        return list(self._themes.values())

    @property
    def known_ids(self) -> set[str]:
        return set(self._themes)

    def get(self, theme_id: str) -> Theme | None:
        return self._themes.get(theme_id)

    def register(self, theme: Theme) -> bool:
        """Add a theme unless its id is already taken."""
        if theme.id in self._themes:
            logger.debug(f"Theme '{theme.id}' already registered, skipping")
            return False
        self._themes[theme.id] = theme
        return True

    def reload(self) -> None:
        """Rebuild the registry from the built-in theme and ``themes_dir``."""
        self._themes = {DEFAULT_THEME.id: DEFAULT_THEME}
        if self.themes_dir is None or not self.themes_dir.exists():
            return

        custom_count = 0
        for theme_file in sorted(self.themes_dir.glob("*.json")):
            try:
                with open(theme_file, encoding="utf-8") as f:
                    theme = Theme.model_validate(json.load(f))
            except (OSError, ValueError, ValidationError) as e:
                logger.error(f"Failed to load theme {theme_file.name}: {e}")
                continue
            if self.register(theme):
                custom_count += 1

        if custom_count:
            logger.info(f"Loaded {custom_count} custom themes from {self.themes_dir}")

    def set_global_theme(self, theme_id: str) -> bool:
        """Select the global theme.

        Returns:
            True if the theme exists and was selected, False otherwise.
        """
        if theme_id not in self._themes:
            logger.warning(f"Attempted to set unknown theme: '{theme_id}'")
            return False
        if theme_id != self.global_theme_id:
            logger.info(f"Global theme changed: '{self.global_theme_id}' -> '{theme_id}'")
        self.global_theme_id = theme_id
        return True

    def set_entity_theme(self, entity: EntityProfile, theme_id: str | None) -> bool:
        """Set or clear an entity's theme override.

        An unknown id clears the override, so a stored override always
        references an existing theme.

        Returns:
            True if the override now names ``theme_id``.
        """
        if theme_id is not None and theme_id not in self._themes:
            logger.warning(f"Unknown theme '{theme_id}' for entity {entity.id}, inheriting global")
            entity.theme_id = None
            return False
        entity.theme_id = theme_id
        return theme_id is not None

    def choice_for(self, entity: EntityProfile | None) -> ThemeChoice:
        return ThemeChoice(
            global_id=self.global_theme_id,
            entity_override_id=entity.theme_id if entity is not None else None,
        )

    def resolve_id(self, choice: ThemeChoice) -> str:
        return resolve_theme_id(
            choice.entity_override_id, choice.global_id, self._themes, self.fallback_id
        )

    def resolve(self, entity: EntityProfile | None = None) -> Theme:
        """Return the theme that applies to ``entity`` (or globally)."""
        theme_id = self.resolve_id(self.choice_for(entity))
        return self._themes.get(theme_id, DEFAULT_THEME)
