"""Tests for chancery.core.service — the wired engine.

Tests cover:
- Loading, saving and sample-data seeding.
- Section edits re-evaluating preset bindings.
- Fill from defaults, clear all sections and duplicate item.
- Composition with the configured catalog.
- Theme and generator selection.
"""

from __future__ import annotations

from chancery.core.binding import UNBOUND, Bound
from chancery.core.config import ChanceryConfig
from chancery.core.presets import SAMPLE_PRESETS
from chancery.core.service import ChanceryService


class TestLifecycle:
    """Verify load, save and seeding."""

    def test_empty_store_without_seeding(self, service: ChanceryService):
        """With seeding disabled a fresh store is empty."""
        assert len(service.presets) == 0
        assert service.defaults.global_defaults == {}
        assert service.entities == []

    def test_seeds_fresh_store(self, test_config: ChanceryConfig):
        """A brand-new store is seeded when seeding is enabled."""
        test_config.seed_sample_data = True
        svc = ChanceryService(test_config)
        svc.load()

        assert len(svc.presets) == len(SAMPLE_PRESETS)
        assert svc.defaults.get_global("outfit")

    def test_does_not_reseed_existing_store(self, test_config: ChanceryConfig):
        """Once saved, emptied state is not reseeded on the next load."""
        test_config.seed_sample_data = True
        svc = ChanceryService(test_config)
        svc.load()
        for preset in list(svc.presets):
            svc.remove_preset(preset.id)
        svc.save()

        reloaded = ChanceryService(test_config)
        reloaded.load()
        assert len(reloaded.presets) == 0

    def test_save_and_reload(self, service: ChanceryService, test_config: ChanceryConfig):
        """All state survives a save/load cycle."""
        service.upsert_preset("outfit", "Casual", "hoodie")
        service.set_global_default("pose", "standing")
        service.set_global_generator("ai-anime")
        entity = service.create_entity("Mira", bio="Cartographer.")
        service.set_entity_default(entity, "outfit", "armor")
        item = service.add_item(entity, "Portrait", sections={"outfit": "hoodie"})
        service.save()

        reloaded = ChanceryService(test_config)
        reloaded.load()

        loaded_entity = reloaded.get_entity(entity.id)
        assert loaded_entity.defaults == {"outfit": "armor"}
        assert loaded_entity.get_item(item.id).preset_names == {"outfit": "Casual"}
        assert reloaded.defaults.global_defaults == {"pose": "standing"}
        assert reloaded.global_generator == "ai-anime"
        assert reloaded.compose(loaded_entity, loaded_entity.get_item(item.id)) == service.compose(
            entity, item
        )


class TestSectionEditing:
    """Verify edits and their bindings."""

    def test_set_section_binds(self, service: ChanceryService):
        service.upsert_preset("outfit", "Casual", "hoodie, jeans")
        entity = service.create_entity("Mira")
        item = service.add_item(entity)

        assert service.set_section_text(item, "outfit", "hoodie, jeans") == Bound("Casual")
        assert service.set_section_text(item, "outfit", "hoodie, jeans, cap") == UNBOUND
        assert service.set_section_text(item, "outfit", "") == UNBOUND
        assert item.sections == {}

    def test_add_item_computes_bindings(self, service: ChanceryService):
        """Initial sections are bound on creation."""
        service.upsert_preset("pose", "Hero", "standing tall")
        entity = service.create_entity("Mira")
        item = service.add_item(entity, sections={"pose": "standing tall"})
        assert item.preset_names == {"pose": "Hero"}

    def test_apply_preset(self, service: ChanceryService):
        """Applying a preset copies its text and binds to it."""
        preset = service.upsert_preset("lighting", "Golden Hour", "golden hour light")
        entity = service.create_entity("Mira")
        item = service.add_item(entity)

        assert service.apply_preset(item, preset.id) == Bound("Golden Hour")
        assert item.section_text("lighting") == "golden hour light"

    def test_apply_unknown_preset(self, service: ChanceryService):
        entity = service.create_entity("Mira")
        item = service.add_item(entity)
        assert service.apply_preset(item, "missing") is None
        assert item.sections == {}

    def test_save_section_as_preset(self, service: ChanceryService):
        """Saving a section as a preset binds the section to it."""
        entity = service.create_entity("Mira")
        item = service.add_item(entity, sections={"outfit": "travel cloak"})

        preset = service.save_section_as_preset(item, "outfit", "Traveller")
        assert preset.text == "travel cloak"
        assert item.preset_names == {"outfit": "Traveller"}

    def test_save_blank_section_as_preset(self, service: ChanceryService):
        entity = service.create_entity("Mira")
        item = service.add_item(entity)
        assert service.save_section_as_preset(item, "outfit", "Nothing") is None
        assert len(service.presets) == 0


class TestBulkItemOperations:
    """Verify fill, clear and duplicate."""

    def test_fill_from_defaults(self, service: ChanceryService):
        """Every section takes its effective default and bindings are resynced."""
        service.set_global_default("outfit", "casual")
        service.set_global_default("lighting", "soft light")
        service.upsert_preset("lighting", "Soft", "soft light")
        entity = service.create_entity("Mira")
        service.set_entity_default(entity, "outfit", "armor")
        item = service.add_item(entity, sections={"pose": "sitting"})

        service.fill_from_defaults(entity, item)

        assert item.sections == {"outfit": "armor", "lighting": "soft light"}
        assert item.preset_names == {"lighting": "Soft"}

    def test_fill_keeps_additional_info(self, service: ChanceryService):
        entity = service.create_entity("Mira")
        item = service.add_item(entity, additional_info="holding a map")
        service.fill_from_defaults(entity, item)
        assert item.additional_info == "holding a map"

    def test_clear_all_sections(self, service: ChanceryService):
        """Clearing removes sections, bindings and additional info."""
        service.upsert_preset("pose", "Hero", "standing tall")
        entity = service.create_entity("Mira")
        item = service.add_item(
            entity, sections={"pose": "standing tall", "outfit": "hoodie"}, additional_info="x"
        )

        service.clear_all_sections(item)

        assert item.sections == {}
        assert item.preset_names == {}
        assert item.additional_info == ""
        assert service.compose(None, item) == ""

    def test_duplicate_item(self, service: ChanceryService):
        """A duplicate copies content under a new id right after the original."""
        service.upsert_preset("pose", "Hero", "standing tall")
        entity = service.create_entity("Mira")
        first = service.add_item(entity, "Portrait", sections={"pose": "standing tall"})
        last = service.add_item(entity, "Landscape")

        copy = service.duplicate_item(entity, first)

        assert copy.id != first.id
        assert copy.title == "Portrait (Copy)"
        assert copy.sections == first.sections
        assert copy.preset_names == {"pose": "Hero"}
        assert [i.id for i in entity.items] == [first.id, copy.id, last.id]

    def test_duplicate_is_independent(self, service: ChanceryService):
        """Editing the copy leaves the original untouched."""
        entity = service.create_entity("Mira")
        original = service.add_item(entity, "Portrait", sections={"pose": "sitting"})
        copy = service.duplicate_item(entity, original, "  Variant  ")

        service.set_section_text(copy, "pose", "running")
        assert copy.title == "Variant"
        assert original.section_text("pose") == "sitting"


class TestPreview:
    def test_preview_effective_value(self, service: ChanceryService):
        """Preview reports entity default, then global default."""
        service.set_global_default("outfit", "casual")
        entity = service.create_entity("Mira")

        assert service.preview_effective_value("outfit", entity) == "casual"
        service.set_entity_default(entity, "outfit", "armor")
        assert service.preview_effective_value("outfit", entity) == "armor"
        assert service.preview_effective_value("outfit") == "casual"
        assert service.preview_effective_value("pose", entity) is None


class TestCompactCatalog:
    def test_compact_service_skips_physical_description(self, test_config: ChanceryConfig):
        test_config.section_catalog = "compact"
        svc = ChanceryService(test_config)
        entity = svc.create_entity("Mira")
        item = svc.add_item(entity, sections={"physicalDescription": "tall"})

        assert svc.compose(entity, item) == "Name:\nMira"


class TestSelection:
    """Verify theme and generator selection."""

    def test_generator_tiers(self, service: ChanceryService):
        """Entity generator, then global generator, then fallback."""
        entity = service.create_entity("Mira")
        assert service.resolve_generator(entity) == "ai-vibrant-image-generator"

        service.set_entity_generator(entity, "ai-anime")
        assert service.generator_url(entity) == "https://perchance.org/ai-anime"

        service.set_entity_generator(entity, " ")
        service.global_generator = ""
        assert service.resolve_generator(entity) == "ai-artgen"

    def test_blank_global_generator_restores_default(self, service: ChanceryService):
        assert service.set_global_generator("  ") == "ai-vibrant-image-generator"

    def test_theme_defaults(self, service: ChanceryService):
        entity = service.create_entity("Mira")
        assert service.resolve_theme(entity).id == "default"
        assert service.set_global_theme("missing") is False
        assert service.set_entity_theme(entity, "missing") is False
        assert entity.theme_id is None
