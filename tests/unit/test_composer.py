"""Tests for chancery.core.composer — final prompt composition.

Tests cover:
- Block order and the "Title:\\ntext" format.
- Absent blocks are skipped with no heading.
- Negative prompt formatting and prefix detection.
- Default fallback through entity and global tiers.
- Byte-identical output for identical inputs.
"""

from __future__ import annotations

import pytest

from chancery.core.composer import compose, format_negative
from chancery.core.models import EntityProfile, PromptItem
from chancery.core.sections import COMPACT_SECTIONS, FULL_SECTIONS


class TestFormatNegative:
    """Verify the negative-prompt line."""

    def test_prefix_added(self):
        """Plain text gets the prefix."""
        assert format_negative("no text, no watermark") == "Negative prompt: no text, no watermark"

    @pytest.mark.parametrize(
        "text",
        ["Negative prompt: clean", "negative prompt: clean", "NEGATIVE PROMPT clean"],
    )
    def test_existing_prefix_kept(self, text):
        """Text already starting with the phrase is left unchanged."""
        assert format_negative(text) == text


class TestCompose:
    """Verify composition of full documents."""

    def test_empty_entity_and_item(self):
        """Nothing to compose yields an empty string."""
        assert compose(EntityProfile(), PromptItem(), {}) == ""

    def test_no_entity_no_item_no_defaults(self):
        """Missing entity and item with no defaults yield an empty string."""
        assert compose(None, None, None) == ""

    def test_block_order_and_format(self):
        """Blocks appear in order, separated by exactly one blank line."""
        entity = EntityProfile(name="Mira", bio="Cartographer.")
        item = PromptItem(
            sections={
                "negative": "no text",
                "outfit": "hoodie",
                "physicalDescription": "tall, freckles",
            },
            additional_info="holding a map",
        )

        assert compose(entity, item, {}) == (
            "Name:\nMira\n\n"
            "Bio:\nCartographer.\n\n"
            "Physical Description:\ntall, freckles\n\n"
            "Outfit:\nhoodie\n\n"
            "Negative prompt: no text\n\n"
            "Additional Information:\nholding a map"
        )

    def test_values_are_trimmed(self):
        """Block text is trimmed and no trailing newline is emitted."""
        entity = EntityProfile(name="  Mira  ")
        item = PromptItem(sections={"pose": "  sitting \n"})

        text = compose(entity, item, {})
        assert text == "Name:\nMira\n\nPose:\nsitting"
        assert not text.endswith("\n")

    def test_blank_blocks_skipped(self):
        """Whitespace-only name and bio produce no headings."""
        entity = EntityProfile(name="  ", bio="\n")
        item = PromptItem(sections={"lighting": "golden hour"})
        assert compose(entity, item, {}) == "Lighting:\ngolden hour"

    def test_negative_already_prefixed(self):
        """A prefixed negative is emitted unchanged."""
        item = PromptItem(sections={"negative": "Negative prompt: clean"})
        assert compose(None, item, {}) == "Negative prompt: clean"

    def test_section_titles(self):
        """Style and technical sections use their display titles."""
        item = PromptItem(sections={"style": "oil painting", "technical": "8k"})
        assert compose(None, item, {}) == (
            "Style Modifiers:\noil painting\n\nTechnical Modifiers:\n8k"
        )

    def test_defaults_fill_blank_sections(self):
        """Blank item sections fall back to entity then global defaults."""
        entity = EntityProfile(name="Mira", defaults={"outfit": "armor"})
        item = PromptItem()
        global_defaults = {"outfit": "casual", "lighting": "soft light"}

        assert compose(entity, item, global_defaults) == (
            "Name:\nMira\n\nOutfit:\narmor\n\nLighting:\nsoft light"
        )

    def test_additional_info_has_no_defaults(self):
        """Additional information is never filled from defaults."""
        item = PromptItem()
        assert compose(None, item, {"additional_info": "x"}) == ""

    def test_compact_catalog_omits_physical_description(self):
        """The compact catalog does not compose physical description."""
        item = PromptItem(sections={"physicalDescription": "tall", "pose": "sitting"})
        assert compose(None, item, {}, COMPACT_SECTIONS) == "Pose:\nsitting"

    def test_idempotent(self):
        """Composing twice produces byte-identical output."""
        entity = EntityProfile(name="Mira", bio="Cartographer.", defaults={"pose": "kneeling"})
        item = PromptItem(sections={"outfit": "hoodie", "negative": "blurry"})
        defaults = {"lighting": "dusk"}

        assert compose(entity, item, defaults, FULL_SECTIONS) == compose(
            entity, item, defaults, FULL_SECTIONS
        )


class TestOutfitOverrideScenario:
    """Global casual default, entity armor default, then an explicit item value."""

    def test_layers(self):
        """Each tier takes over as the more specific one is set or cleared."""
        global_defaults = {"outfit": "casual"}
        entity = EntityProfile(name="Knight")
        item = PromptItem()

        assert "Outfit:\ncasual" in compose(entity, item, global_defaults)

        entity.defaults["outfit"] = "armor"
        assert "Outfit:\narmor" in compose(entity, item, global_defaults)

        item.set_section("outfit", "ceremonial robes")
        assert "Outfit:\nceremonial robes" in compose(entity, item, global_defaults)

        item.set_section("outfit", "")
        assert "Outfit:\narmor" in compose(entity, item, global_defaults)
