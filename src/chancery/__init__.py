"""Chancery - layered prompt composition with presets, defaults and themes."""

__version__ = "0.1.0"

from chancery.core.config import ChanceryConfig, config
from chancery.core.service import ChanceryService

__all__ = [
    "ChanceryConfig",
    "ChanceryService",
    "config",
]
