"""Chancery - FastAPI REST API layer.

This package exposes :class:`~chancery.core.service.ChanceryService` over
HTTP so that any front end can edit presets, defaults and items and preview
the composed prompt.

Modules
-------
main
    FastAPI application with all route handlers and the ``main()`` CLI
    entry point.
models
    Pydantic models for API request and response validation.
"""
