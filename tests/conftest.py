"""Shared pytest fixtures for Chancery tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from chancery.core.config import ChanceryConfig
from chancery.core.models import EntityProfile, PromptItem
from chancery.core.presets import PresetLibrary
from chancery.core.service import ChanceryService


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> ChanceryConfig:
    """Create a test configuration with temporary directories.

    Sample data seeding is off so every test starts from an empty store.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        ChanceryConfig instance for testing
    """
    return ChanceryConfig(
        _env_file=None,
        data_dir=temp_dir / "data",
        themes_dir=temp_dir / "themes",
        section_catalog="full",
        seed_sample_data=False,
    )


@pytest.fixture
def service(test_config: ChanceryConfig) -> ChanceryService:
    """A loaded service over an empty temporary store."""
    svc = ChanceryService(test_config)
    svc.load()
    return svc


@pytest.fixture
def library() -> PresetLibrary:
    """A preset library with a few outfit and negative presets."""
    lib = PresetLibrary()
    lib.upsert("outfit", "Casual", "hoodie, jeans")
    lib.upsert("outfit", "Armor", "plate armor")
    lib.upsert("negative", "Clean", "no text, no watermark")
    return lib


@pytest.fixture
def entity() -> EntityProfile:
    """An entity with a name, bio and one entity-level default."""
    return EntityProfile(
        name="Mira",
        bio="A travelling cartographer.",
        defaults={"lighting": "lantern light"},
    )


@pytest.fixture
def item() -> PromptItem:
    return PromptItem(title="Market day")


@pytest.fixture
def test_client(service: ChanceryService):
    """FastAPI TestClient bound to an isolated service.

    The service is attached to ``app.state`` before startup so the
    application lifespan uses it instead of the global configuration.
    """
    from fastapi.testclient import TestClient

    from chancery.api.main import app

    app.state.service = service
    try:
        with TestClient(app) as client:
            yield client
    finally:
        del app.state.service
