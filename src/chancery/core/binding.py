"""Preset binding detection.

An item's section is *bound* to a preset while its text, trimmed, exactly
equals that preset's trimmed text.  The binding is advisory display metadata
("Using: Casual Outfit"), not a foreign key, so it is recomputed from scratch
whenever the section text changes rather than maintained incrementally.

State Machine
-------------
Each ``(item, kind)`` pair is either :class:`Bound` or :class:`Unbound`.
On every text change, including programmatic ones such as applying a preset
or filling from defaults:

1. Blank text: Unbound.
2. Currently Bound(N) and a preset of that kind named N still has the same
   text: stay Bound(N).  This runs before the scan so that two presets with
   identical text do not make the marker jump to whichever comes first.
3. The first preset of that kind whose text matches: Bound(its name).
4. Otherwise: Unbound.

Edits to the preset library while an item is open are only picked up on the
next text change; nothing is pushed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .models import PromptItem
from .presets import PresetLibrary
from .text import non_empty

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bound:
    """The section text matches the named preset."""

    preset_name: str


@dataclass(frozen=True)
class Unbound:
    """The section text matches no preset."""


BindingState = Bound | Unbound

UNBOUND = Unbound()


def state_from_name(preset_name: str | None) -> BindingState:
    """Convert a stored preset name (or ``None``) to a binding state."""
    name = non_empty(preset_name)
    return Bound(name) if name is not None else UNBOUND


def evaluate_binding(
    library: PresetLibrary,
    kind: str,
    text: str | None,
    current: BindingState = UNBOUND,
) -> BindingState:
    """Compute the binding state for one section's current text.

    Args:
        library: Preset library to match against.
        kind: Section kind of the text.
        text: Current section text.
        current: Binding state before the change.

    Returns:
        The new binding state.
    """
    trimmed = non_empty(text)
    if trimmed is None:
        return UNBOUND

    presets = library.list_by_kind(kind)

    if isinstance(current, Bound):
        still_matching = any(
            preset.name == current.preset_name and preset.text.strip() == trimmed
            for preset in presets
        )
        if still_matching:
            return current

    match = next((preset for preset in presets if preset.text.strip() == trimmed), None)
    if match is not None:
        return Bound(match.name)
    return UNBOUND


class PresetBindingTracker:
    """Keeps ``PromptItem.preset_names`` in step with section text.

    The tracker holds no state of its own; the current binding of each
    ``(item, kind)`` pair is read from and written back to the item.
    """

    def __init__(self, library: PresetLibrary):
        self.library = library

    def current(self, item: PromptItem, kind: str) -> BindingState:
        return state_from_name(item.preset_names.get(kind))

    def on_text_changed(self, item: PromptItem, kind: str) -> BindingState:
        """Re-evaluate the binding after ``item``'s ``kind`` text changed."""
        previous = self.current(item, kind)
        state = evaluate_binding(self.library, kind, item.section_text(kind), previous)

        if isinstance(state, Bound):
            item.preset_names[kind] = state.preset_name
        else:
            item.preset_names.pop(kind, None)

        if state != previous:
            logger.debug(f"Binding for {kind} on item {item.id}: {previous} -> {state}")
        return state

    def resync_item(self, item: PromptItem, kinds: Iterable[str]) -> dict[str, BindingState]:
        """Re-evaluate every listed kind of ``item``."""
        return {kind: self.on_text_changed(item, kind) for kind in kinds}
