"""Chancery - FastAPI Application.

This module is the single entry point for the web application.  It defines
the FastAPI ``app`` instance, all REST API routes, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
- **State** lives in one :class:`~chancery.core.service.ChanceryService`
  stored on ``app.state.service``.  It is loaded from ``data_dir`` on
  startup and written back after every mutating request and on shutdown.
  Mutating routes are plain ``def`` handlers so those file writes run in
  FastAPI's threadpool instead of blocking the event loop.
- **Validation** of request bodies is done by the Pydantic models in
  :mod:`chancery.api.models`.  Unknown ids map to 404 and section kinds
  outside the configured catalog map to 400.
- **Composition** is never cached: every preview recomputes from the
  current item, entity defaults and global defaults.

Endpoints
---------
======  ================================================  ===============================
Method  Path                                              Purpose
======  ================================================  ===============================
GET     ``/api/config``                                   Sections, themes, global choices
GET     ``/api/sections``                                 Section catalog
GET     ``/api/presets``                                  List presets (``?kind=``)
POST    ``/api/presets``                                  Create or update a preset
DELETE  ``/api/presets/{id}``                             Delete a preset
GET     ``/api/defaults``                                 Global defaults
PUT     ``/api/defaults/{kind}``                          Set or clear a global default
GET     ``/api/defaults/{kind}/effective``                Preview effective default
GET     ``/api/entities``                                 List entities
POST    ``/api/entities``                                 Create an entity
GET     ``/api/entities/{id}``                            Single entity
PATCH   ``/api/entities/{id}``                            Update name, bio or notes
DELETE  ``/api/entities/{id}``                            Delete an entity
PUT     ``/api/entities/{id}/defaults/{kind}``            Set or clear an entity default
PUT     ``/api/entities/{id}/theme``                      Set or clear the theme override
PUT     ``/api/entities/{id}/generator``                  Set or clear the generator
POST    ``/api/entities/{id}/items``                      Create an item
GET     ``/api/entities/{id}/items/{item}``               Single item
DELETE  ``/api/entities/{id}/items/{item}``               Delete an item
PUT     ``/api/entities/{id}/items/{item}/sections/{k}``  Edit section text
POST    ``.../sections/{k}/preset``                       Save section text as a preset
PUT     ``.../additional-info``                           Edit additional information
POST    ``.../apply-preset``                              Apply a preset to its section
POST    ``.../fill-defaults``                             Fill sections from defaults
POST    ``.../clear``                                     Clear every section
POST    ``.../duplicate``                                 Duplicate the item
GET     ``.../compose``                                   Composed prompt preview
GET     ``/api/themes``                                   Available themes
PUT     ``/api/themes/global``                            Select the global theme
GET     ``/api/themes/resolve``                           Effective theme (``?entity_id=``)
GET     ``/api/generator``                                Effective generator (``?entity_id=``)
PUT     ``/api/generator``                                Set the global generator
======  ================================================  ===============================

Usage
-----
CLI (installed entry point)::

    chancery

Direct invocation::

    python -m chancery.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from chancery import __version__
from chancery.api.models import (
    AdditionalInfoRequest,
    ApplyPresetRequest,
    BindingResponse,
    DefaultValueRequest,
    EntityCreateRequest,
    EntityUpdateRequest,
    GeneratorRequest,
    ItemCreateRequest,
    ItemDuplicateRequest,
    PresetUpsertRequest,
    SaveSectionPresetRequest,
    SectionTextRequest,
    ThemeSelectionRequest,
)
from chancery.core.config import config
from chancery.core.models import EntityProfile, PromptItem
from chancery.core.service import ChanceryService

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Application lifecycle: load the configuration state once, save on exit.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    On startup:
        Builds a :class:`ChanceryService` from the global configuration and
        loads it from disk, unless a service has already been attached to
        ``app.state`` (tests attach one built from an isolated config).

    On shutdown:
        Saves the service state back to ``data_dir``.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    # --- Startup -----------------------------------------------------------
    service: ChanceryService | None = getattr(app.state, "service", None)
    if service is None:
        service = ChanceryService(config)
        service.load()
        app.state.service = service
    logger.info("ChanceryService ready.")

    yield  # Application runs here.

    # --- Shutdown ----------------------------------------------------------
    service.save()
    logger.info("ChanceryService state saved on shutdown.")


# ---------------------------------------------------------------------------
# FastAPI application instance.
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Chancery",
    description="Layered prompt composition with presets, defaults and themes.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Lookup helpers.
# ---------------------------------------------------------------------------


def _service(request: Request) -> ChanceryService:
    return request.app.state.service


def _entity_or_404(service: ChanceryService, entity_id: str) -> EntityProfile:
    entity = service.get_entity(entity_id)
    if entity is None:
        raise HTTPException(status_code=404, detail=f"Entity not found: {entity_id}")
    return entity


def _item_or_404(entity: EntityProfile, item_id: str) -> PromptItem:
    item = entity.get_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Item not found: {item_id}")
    return item


def _optional_entity(service: ChanceryService, entity_id: str | None) -> EntityProfile | None:
    if entity_id is None:
        return None
    return _entity_or_404(service, entity_id)


def _require_kind(service: ChanceryService, kind: str) -> None:
    """Reject section kinds outside the configured catalog.

    Raises:
        HTTPException: 400 for an unknown section kind.
    """
    if kind not in service.catalog:
        raise HTTPException(status_code=400, detail=f"Unknown section kind: {kind}")


def _binding(service: ChanceryService, item: PromptItem, kind: str) -> BindingResponse:
    return BindingResponse.from_state(
        kind, item.section_text(kind), service.bindings.current(item, kind)
    )


def _entity_summary(service: ChanceryService, entity: EntityProfile) -> dict:
    return {
        **entity.model_dump(exclude={"items"}),
        "item_count": len(entity.items),
        "has_custom_defaults": entity.has_custom_defaults,
        "has_custom_theme": entity.has_custom_theme,
        "resolved_theme_id": service.resolve_theme(entity).id,
        "resolved_generator": service.resolve_generator(entity),
    }


# ---------------------------------------------------------------------------
# Configuration and catalog.
# ---------------------------------------------------------------------------


@app.get("/api/config")
async def get_config(request: Request) -> dict:
    """Return everything a front end needs on page load.

    Returns:
        Dictionary with keys ``version``, ``sections``, ``themes``,
        ``global_theme_id``, ``global_generator`` and ``global_defaults``.
    """
    service = _service(request)
    return {
        "version": __version__,
        "sections": [section.model_dump() for section in service.catalog],
        "themes": [theme.model_dump() for theme in service.themes.available],
        "global_theme_id": service.themes.global_theme_id,
        "global_generator": service.global_generator,
        "global_defaults": service.defaults.global_defaults,
    }


@app.get("/api/sections")
async def list_sections(request: Request) -> list[dict]:
    return [section.model_dump() for section in _service(request).catalog]


# ---------------------------------------------------------------------------
# Presets.
# ---------------------------------------------------------------------------


@app.get("/api/presets")
async def list_presets(request: Request, kind: str | None = None) -> list[dict]:
    """List presets in insertion order, optionally filtered by kind."""
    return [preset.model_dump() for preset in _service(request).list_presets(kind)]


@app.post("/api/presets")
def upsert_preset(req: PresetUpsertRequest, request: Request) -> dict:
    """Create a preset, or update the text of one with the same name.

    Blank names or text are ignored rather than rejected.

    Returns:
        ``{"saved": bool, "preset": {...} | None}``.

    Raises:
        HTTPException: 400 if ``kind`` is not a known section kind.
    """
    service = _service(request)
    _require_kind(service, req.kind)
    preset = service.upsert_preset(req.kind, req.name, req.text)
    if preset is None:
        return {"saved": False, "preset": None}
    service.save()
    return {"saved": True, "preset": preset.model_dump()}


@app.delete("/api/presets/{preset_id}")
def delete_preset(preset_id: str, request: Request) -> dict:
    service = _service(request)
    if not service.remove_preset(preset_id):
        raise HTTPException(status_code=404, detail=f"Preset not found: {preset_id}")
    service.save()
    return {"success": True, "deleted": preset_id}


# ---------------------------------------------------------------------------
# Global defaults.
# ---------------------------------------------------------------------------


@app.get("/api/defaults")
async def get_global_defaults(request: Request) -> dict[str, str]:
    return _service(request).defaults.global_defaults


@app.put("/api/defaults/{kind}")
def set_global_default(kind: str, req: DefaultValueRequest, request: Request) -> dict:
    """Set a global default; blank text removes it."""
    service = _service(request)
    _require_kind(service, kind)
    service.set_global_default(kind, req.text)
    service.save()
    return {"kind": kind, "text": service.defaults.get_global(kind)}


@app.get("/api/defaults/{kind}/effective")
async def preview_effective_default(
    kind: str, request: Request, entity_id: str | None = None
) -> dict:
    """Preview what a blank ``kind`` field would fall back to."""
    service = _service(request)
    _require_kind(service, kind)
    entity = _optional_entity(service, entity_id)
    return {"kind": kind, "text": service.preview_effective_value(kind, entity)}


# ---------------------------------------------------------------------------
# Entities.
# ---------------------------------------------------------------------------


@app.get("/api/entities")
async def list_entities(request: Request) -> list[dict]:
    service = _service(request)
    return [_entity_summary(service, entity) for entity in service.entities]


@app.post("/api/entities")
def create_entity(req: EntityCreateRequest, request: Request) -> dict:
    service = _service(request)
    entity = service.create_entity(req.name, bio=req.bio, notes=req.notes)
    service.save()
    return entity.model_dump()


@app.get("/api/entities/{entity_id}")
async def get_entity(entity_id: str, request: Request) -> dict:
    return _entity_or_404(_service(request), entity_id).model_dump()


@app.patch("/api/entities/{entity_id}")
def update_entity(entity_id: str, req: EntityUpdateRequest, request: Request) -> dict:
    service = _service(request)
    entity = _entity_or_404(service, entity_id)
    for field, value in req.model_dump(exclude_none=True).items():
        setattr(entity, field, value)
    service.save()
    return entity.model_dump()


@app.delete("/api/entities/{entity_id}")
def delete_entity(entity_id: str, request: Request) -> dict:
    service = _service(request)
    if not service.remove_entity(entity_id):
        raise HTTPException(status_code=404, detail=f"Entity not found: {entity_id}")
    service.save()
    return {"success": True, "deleted": entity_id}


@app.put("/api/entities/{entity_id}/defaults/{kind}")
def set_entity_default(
    entity_id: str, kind: str, req: DefaultValueRequest, request: Request
) -> dict:
    """Set an entity-level default; blank text removes it."""
    service = _service(request)
    _require_kind(service, kind)
    entity = _entity_or_404(service, entity_id)
    service.set_entity_default(entity, kind, req.text)
    service.save()
    return {"kind": kind, "text": service.defaults.get_entity(entity, kind)}


@app.put("/api/entities/{entity_id}/theme")
def set_entity_theme(entity_id: str, req: ThemeSelectionRequest, request: Request) -> dict:
    """Set or clear an entity's theme override.

    An unknown theme id clears the override; the response reports the
    override actually stored and the theme that now applies.
    """
    service = _service(request)
    entity = _entity_or_404(service, entity_id)
    service.set_entity_theme(entity, req.theme_id)
    service.save()
    return {
        "theme_id": entity.theme_id,
        "resolved_theme_id": service.resolve_theme(entity).id,
    }


@app.put("/api/entities/{entity_id}/generator")
def set_entity_generator(entity_id: str, req: GeneratorRequest, request: Request) -> dict:
    service = _service(request)
    entity = _entity_or_404(service, entity_id)
    service.set_entity_generator(entity, req.slug)
    service.save()
    return {
        "generator": entity.generator,
        "resolved_generator": service.resolve_generator(entity),
        "url": service.generator_url(entity),
    }


# ---------------------------------------------------------------------------
# Items.
# ---------------------------------------------------------------------------


@app.post("/api/entities/{entity_id}/items")
def create_item(entity_id: str, req: ItemCreateRequest, request: Request) -> dict:
    """Create an item on an entity.

    Raises:
        HTTPException: 404 for an unknown entity, 400 if ``sections``
            names a kind outside the catalog.
    """
    service = _service(request)
    entity = _entity_or_404(service, entity_id)
    for kind in req.sections:
        _require_kind(service, kind)
    item = service.add_item(
        entity, req.title, sections=req.sections, additional_info=req.additional_info
    )
    service.save()
    return item.model_dump()


@app.get("/api/entities/{entity_id}/items/{item_id}")
async def get_item(entity_id: str, item_id: str, request: Request) -> dict:
    entity = _entity_or_404(_service(request), entity_id)
    return _item_or_404(entity, item_id).model_dump()


@app.delete("/api/entities/{entity_id}/items/{item_id}")
def delete_item(entity_id: str, item_id: str, request: Request) -> dict:
    service = _service(request)
    entity = _entity_or_404(service, entity_id)
    if not service.remove_item(entity, item_id):
        raise HTTPException(status_code=404, detail=f"Item not found: {item_id}")
    service.save()
    return {"success": True, "deleted": item_id}


@app.put("/api/entities/{entity_id}/items/{item_id}/sections/{kind}")
def set_section_text(
    entity_id: str, item_id: str, kind: str, req: SectionTextRequest, request: Request
) -> BindingResponse:
    """Replace one section's text and report its preset binding."""
    service = _service(request)
    _require_kind(service, kind)
    item = _item_or_404(_entity_or_404(service, entity_id), item_id)
    service.set_section_text(item, kind, req.text)
    service.save()
    return _binding(service, item, kind)


@app.post("/api/entities/{entity_id}/items/{item_id}/sections/{kind}/preset")
def save_section_as_preset(
    entity_id: str, item_id: str, kind: str, req: SaveSectionPresetRequest, request: Request
) -> dict:
    service = _service(request)
    _require_kind(service, kind)
    item = _item_or_404(_entity_or_404(service, entity_id), item_id)
    preset = service.save_section_as_preset(item, kind, req.name)
    if preset is not None:
        service.save()
    return {
        "saved": preset is not None,
        "preset": preset.model_dump() if preset is not None else None,
        "binding": _binding(service, item, kind).model_dump(),
    }


@app.put("/api/entities/{entity_id}/items/{item_id}/additional-info")
def set_additional_info(
    entity_id: str, item_id: str, req: AdditionalInfoRequest, request: Request
) -> dict:
    service = _service(request)
    item = _item_or_404(_entity_or_404(service, entity_id), item_id)
    service.set_additional_info(item, req.text)
    service.save()
    return item.model_dump()


@app.post("/api/entities/{entity_id}/items/{item_id}/apply-preset")
def apply_preset(
    entity_id: str, item_id: str, req: ApplyPresetRequest, request: Request
) -> BindingResponse:
    """Copy a preset's text into the section of the preset's kind."""
    service = _service(request)
    item = _item_or_404(_entity_or_404(service, entity_id), item_id)
    preset = service.presets.get(req.preset_id)
    if preset is None:
        raise HTTPException(status_code=404, detail=f"Preset not found: {req.preset_id}")
    service.apply_preset(item, preset.id)
    service.save()
    return _binding(service, item, preset.kind)


@app.post("/api/entities/{entity_id}/items/{item_id}/fill-defaults")
def fill_from_defaults(entity_id: str, item_id: str, request: Request) -> list[dict]:
    service = _service(request)
    entity = _entity_or_404(service, entity_id)
    item = _item_or_404(entity, item_id)
    service.fill_from_defaults(entity, item)
    service.save()
    return [_binding(service, item, kind).model_dump() for kind in service.catalog.keys()]


@app.post("/api/entities/{entity_id}/items/{item_id}/clear")
def clear_item(entity_id: str, item_id: str, request: Request) -> dict:
    service = _service(request)
    item = _item_or_404(_entity_or_404(service, entity_id), item_id)
    service.clear_all_sections(item)
    service.save()
    return item.model_dump()


@app.post("/api/entities/{entity_id}/items/{item_id}/duplicate")
def duplicate_item(
    entity_id: str, item_id: str, req: ItemDuplicateRequest, request: Request
) -> dict:
    service = _service(request)
    entity = _entity_or_404(service, entity_id)
    item = _item_or_404(entity, item_id)
    copy = service.duplicate_item(entity, item, req.title)
    service.save()
    return copy.model_dump()


@app.get("/api/entities/{entity_id}/items/{item_id}/compose")
async def compose_item(entity_id: str, item_id: str, request: Request) -> dict:
    """Compose the prompt for one item.

    Returns:
        Dictionary with ``prompt`` (the composed text), ``generator`` and
        ``generator_url`` for the entity.
    """
    service = _service(request)
    entity = _entity_or_404(service, entity_id)
    item = _item_or_404(entity, item_id)
    return {
        "prompt": service.compose(entity, item),
        "generator": service.resolve_generator(entity),
        "generator_url": service.generator_url(entity),
    }


# ---------------------------------------------------------------------------
# Themes and generators.
# ---------------------------------------------------------------------------


@app.get("/api/themes")
async def list_themes(request: Request) -> dict:
    service = _service(request)
    return {
        "global_theme_id": service.themes.global_theme_id,
        "themes": [theme.model_dump() for theme in service.themes.available],
    }


@app.put("/api/themes/global")
def set_global_theme(req: ThemeSelectionRequest, request: Request) -> dict:
    """Select the global theme.

    Raises:
        HTTPException: 404 if the theme id is unknown.
    """
    service = _service(request)
    if not req.theme_id or not service.set_global_theme(req.theme_id):
        raise HTTPException(status_code=404, detail=f"Theme not found: {req.theme_id}")
    service.save()
    return {"global_theme_id": service.themes.global_theme_id}


@app.get("/api/themes/resolve")
async def resolve_theme(request: Request, entity_id: str | None = None) -> dict:
    service = _service(request)
    entity = _optional_entity(service, entity_id)
    return service.resolve_theme(entity).model_dump()


@app.get("/api/generator")
async def get_generator(request: Request, entity_id: str | None = None) -> dict:
    service = _service(request)
    entity = _optional_entity(service, entity_id)
    return {
        "generator": service.resolve_generator(entity),
        "url": service.generator_url(entity),
    }


@app.put("/api/generator")
def set_global_generator(req: GeneratorRequest, request: Request) -> dict:
    """Set the global generator; blank restores the configured default."""
    service = _service(request)
    slug = service.set_global_generator(req.slug)
    service.save()
    return {"generator": slug, "url": service.generator_url()}


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~chancery.core.config.config` (which
    loads from ``CHANCERY_SERVER_HOST`` and ``CHANCERY_SERVER_PORT``
    environment variables).  Defaults to ``0.0.0.0:7870``.

    This function is registered as the ``chancery`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(
        "chancery.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
