"""Unit tests for the section catalog."""

import pytest

from chancery.core.sections import (
    COMPACT_SECTIONS,
    FULL_SECTIONS,
    NEGATIVE_KIND,
    SectionCatalog,
    SectionDefinition,
    get_catalog,
)


class TestBuiltinCatalogs:
    """Tests for the full and compact catalogs."""

    def test_full_order(self):
        """The full catalog lists every section in composition order."""
        assert FULL_SECTIONS.keys() == [
            "physicalDescription",
            "outfit",
            "pose",
            "environment",
            "lighting",
            "style",
            "technical",
            "negative",
        ]

    def test_compact_omits_physical_description(self):
        """The compact catalog is the full one without physical description."""
        assert COMPACT_SECTIONS.keys() == FULL_SECTIONS.keys()[1:]
        assert "physicalDescription" not in COMPACT_SECTIONS

    def test_negative_is_last(self):
        """The negative section closes both catalogs."""
        assert FULL_SECTIONS.keys()[-1] == NEGATIVE_KIND
        assert COMPACT_SECTIONS.keys()[-1] == NEGATIVE_KIND

    def test_titles(self):
        """Display titles differ from keys where needed."""
        assert FULL_SECTIONS.title("style") == "Style Modifiers"
        assert FULL_SECTIONS.title("technical") == "Technical Modifiers"
        assert FULL_SECTIONS.title("physicalDescription") == "Physical Description"

    def test_unknown_title_is_key(self):
        assert FULL_SECTIONS.title("weather") == "weather"


class TestCatalogLookup:
    def test_get_catalog(self):
        """Configuration names map to the built-in catalogs."""
        assert get_catalog("full") is FULL_SECTIONS
        assert get_catalog("compact") is COMPACT_SECTIONS

    def test_get_unknown_catalog_falls_back(self):
        assert get_catalog("other") is FULL_SECTIONS

    def test_duplicate_keys_rejected(self):
        """A catalog cannot list the same key twice."""
        definition = SectionDefinition(key="pose", title="Pose")
        with pytest.raises(ValueError):
            SectionCatalog([definition, definition])

    def test_custom_catalog(self):
        """Custom catalogs keep the order they are given."""
        catalog = SectionCatalog(
            [
                SectionDefinition(key="mood", title="Mood"),
                SectionDefinition(key="pose", title="Pose"),
            ]
        )
        assert len(catalog) == 2
        assert [d.key for d in catalog] == ["mood", "pose"]
        assert catalog.get("mood").title == "Mood"
