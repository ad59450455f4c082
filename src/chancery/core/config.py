"""Configuration management for the Chancery prompt engine.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the CHANCERY_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (CHANCERY_* prefix)
2. .env file in the project root
3. Default values defined in ChanceryConfig

Example .env file:
    CHANCERY_DATA_DIR=data
    CHANCERY_SECTION_CATALOG=compact
    CHANCERY_DEFAULT_THEME_ID=default
    CHANCERY_SERVER_PORT=7870

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
The API layer reads it once to build its configuration service; tests build
their own isolated ChanceryConfig instances instead.

Usage Example
-------------
    from chancery.core.config import config

    print(config.data_dir)
    print(config.section_catalog)

Directory Management
--------------------
The configuration creates required directories on initialization:
- data_dir: JSON files for presets, settings and entities
- themes_dir: Custom theme JSON files

See Also
--------
- ChanceryService: Consumes this configuration to wire the engine together
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChanceryConfig(BaseSettings):
    """Main configuration for the Chancery prompt engine.

    Values are loaded from environment variables with the CHANCERY_ prefix,
    with fallback to the defaults defined here.

    Attributes
    ----------
    Storage:
        data_dir : Path
            Directory holding presets.json, settings.json and entities.json
        themes_dir : Path
            Directory scanned for custom theme JSON files

    Prompt Composition:
        section_catalog : Literal["full", "compact"]
            Which section list to compose ("compact" has no physical description)
        seed_sample_data : bool
            Populate sample presets and global defaults in an empty store

    Selection Fallbacks:
        default_theme_id : str
            Built-in theme used when neither global nor entity choice is valid
        default_generator : str
            Initial global generator slug
        fallback_generator : str
            Generator slug used when no tier provides one

    Server:
        server_host : str
            Bind address for the API server
        server_port : int
            Port for the API server (1024-65535)

    Examples
    --------
        >>> custom_config = ChanceryConfig(
        ...     data_dir="/tmp/chancery",
        ...     section_catalog="compact",
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CHANCERY_",
        case_sensitive=False,
    )

    # Storage
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory for JSON persistence files",
    )
    themes_dir: Path = Field(
        default=Path("themes"),
        description="Directory scanned for custom theme JSON files",
    )

    # Prompt composition
    section_catalog: Literal["full", "compact"] = Field(
        default="full",
        description="Section list used for composition (compact omits physical description)",
    )
    seed_sample_data: bool = Field(
        default=True,
        description="Seed sample presets and global defaults into an empty store",
    )

    # Selection fallbacks
    default_theme_id: str = Field(
        default="default",
        description="Built-in theme used when no other tier resolves",
    )
    default_generator: str = Field(
        default="ai-vibrant-image-generator",
        description="Initial global generator slug",
    )
    fallback_generator: str = Field(
        default="ai-artgen",
        description="Generator slug used when neither entity nor global choice is set",
    )

    # Server
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7870,
        description="Server port",
        ge=1024,
        le=65535,
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create required directories.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.themes_dir.mkdir(parents=True, exist_ok=True)


# Global configuration instance
# Loads values from environment variables (CHANCERY_* prefix) and .env file.
config = ChanceryConfig()
