"""Text normalisation helpers shared by the stores and the resolver."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def non_empty(text: Any) -> str | None:
    """Return ``text`` trimmed, or ``None`` when it is missing, blank or not a string."""
    if not isinstance(text, str):
        return None
    trimmed = text.strip()
    return trimmed or None


def clean_text_map(values: Mapping[str, Any] | None) -> dict[str, str]:
    """Drop blank entries from a ``key -> text`` map and trim the rest.

    Blank values mean "absent" throughout Chancery, so they are never kept
    as present keys and therefore never serialised.  Non-string values are
    dropped as well.
    """
    cleaned: dict[str, str] = {}
    for key, value in (values or {}).items():
        text = non_empty(value)
        if text is not None:
            cleaned[key] = text
    return cleaned


def drop_blank_entries(values: Any, *, trim: bool) -> Any:
    """Pre-validation cleanup for ``key -> text`` model fields.

    Removes ``None`` and whitespace-only strings, optionally trimming the
    remaining strings.  Anything that is not text (a non-mapping container,
    a number in place of a string) is passed through untouched so that
    model validation rejects it.
    """
    if values is None:
        return {}
    if not isinstance(values, Mapping):
        return values

    cleaned: dict[Any, Any] = {}
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, str):
            if not value.strip():
                continue
            if trim:
                value = value.strip()
        cleaned[key] = value
    return cleaned
