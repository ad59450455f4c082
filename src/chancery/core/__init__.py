"""Core prompt-composition engine.

The core package holds everything that decides *what text* a prompt is made
of.  Rendering, networking and UI concerns live in the hosts that use it.

Architecture Overview
---------------------
The engine is layered bottom-up:

1. **Configuration Layer** (config.py):
   - Environment-based configuration using Pydantic Settings
   - All settings prefixed with CHANCERY_ in .env files

2. **Data Layer** (sections.py, models.py, presets.py, defaults.py):
   - Section catalog (which kinds exist, their order and titles)
   - Entities and their prompt items
   - Named presets per section kind
   - Global and entity-level defaults

3. **Resolution Layer** (resolver.py, binding.py, composer.py, themes.py):
   - One generic "explicit, scoped default, global default" resolver
   - Preset binding detection for section text
   - Final prompt composition
   - Theme registry and theme selection

4. **Service Layer** (service.py, storage.py):
   - ChanceryService wires the pieces together for hosts
   - JSON persistence for presets, settings and entities

Usage Example
-------------
    from chancery.core import ChanceryService, config

    service = ChanceryService(config)
    service.load()
    entity = service.create_entity("Mira", bio="A travelling cartographer")
    item = service.add_item(entity, "Market day")
    print(service.compose(entity, item))

See Also
--------
- chancery.api.main: HTTP surface over ChanceryService
"""

from chancery.core.binding import UNBOUND, Bound, Unbound
from chancery.core.composer import compose
from chancery.core.config import ChanceryConfig, config
from chancery.core.models import EntityProfile, PromptItem
from chancery.core.presets import Preset, PresetLibrary
from chancery.core.resolver import resolve, resolve_section
from chancery.core.service import ChanceryService

__all__ = [
    "UNBOUND",
    "Bound",
    "ChanceryConfig",
    "ChanceryService",
    "EntityProfile",
    "Preset",
    "PresetLibrary",
    "PromptItem",
    "Unbound",
    "compose",
    "config",
    "resolve",
    "resolve_section",
]
