"""The set of documentation sections a search covers.

Each section can be switched on or off on its own. A selection mode
switches many at once: back to their defaults, all on or all off.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any

_log = logging.getLogger(__name__)

SEARCH_GROUP = "Search"
CUSTOM_SCOPE_GROUP = "Custom Search Scope"
SCOPE_SELECTION_KEY = "ScopeSelection"

_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off"})


class ScopeSelection(enum.IntEnum):
    """How the sections to search were chosen."""

    DEFAULT = 0
    ALL = 1
    NONE = 2
    CUSTOM = 3


_LABELS = {
    ScopeSelection.CUSTOM: "Custom",
    ScopeSelection.DEFAULT: "Default",
    ScopeSelection.ALL: "All",
    ScopeSelection.NONE: "None",
}


def scope_selection_label(selection: int) -> str:
    """Return the display label of a selection mode."""
    try:
        return _LABELS[ScopeSelection(selection)]
    except ValueError:
        return "unknown"


@dataclass
class ScopeItem:
    """A searchable documentation section."""

    identifier: str
    name: str = ""
    on: bool = True
    search_enabled_default: bool = True


def _parse_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    word = str(value).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    return default


class ScopeList:
    """Searchable sections in order, with the active selection mode."""

    def __init__(self) -> None:
        self.items: list[ScopeItem] = []
        self.selection = ScopeSelection.DEFAULT

    def __iter__(self) -> Iterator[ScopeItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def add(self, item: ScopeItem) -> ScopeItem:
        """Append a section and return it."""
        self.items.append(item)
        return item

    def select(self, selection: int) -> None:
        """Apply a selection mode to every section.

        DEFAULT restores each section's default, ALL and NONE switch every
        section on or off, and CUSTOM keeps the current states.
        """
        selection = ScopeSelection(selection)
        self.selection = selection
        for item in self.items:
            if selection is ScopeSelection.DEFAULT:
                item.on = item.search_enabled_default
            elif selection is ScopeSelection.ALL:
                item.on = True
            elif selection is ScopeSelection.NONE:
                item.on = False

    def toggle_all(self) -> None:
        """Invert the state of every section."""
        for item in self.items:
            item.on = not item.on

    def scope(self) -> list[str]:
        """Return the identifiers of the sections switched on, in order."""
        return [item.identifier for item in self.items if item.on]

    def scope_count(self) -> int:
        """Return how many sections are switched on."""
        return sum(1 for item in self.items if item.on)

    def read_config(self, config: Mapping[str, Mapping[str, Any]]) -> None:
        """Restore the selection mode and, for CUSTOM, each section's state.

        ``config`` maps group names to key/value mappings; a
        ``configparser.ConfigParser`` works as well as nested dicts.
        """
        group = config[SEARCH_GROUP] if SEARCH_GROUP in config else {}
        raw = group.get(SCOPE_SELECTION_KEY, int(ScopeSelection.DEFAULT))
        try:
            selection = ScopeSelection(int(raw))
        except (TypeError, ValueError):
            _log.warning("invalid scope selection %r, using default", raw)
            selection = ScopeSelection.DEFAULT

        self.selection = selection
        if selection is not ScopeSelection.DEFAULT:
            self.select(selection)

        if selection is ScopeSelection.CUSTOM:
            custom = config[CUSTOM_SCOPE_GROUP] if CUSTOM_SCOPE_GROUP in config else {}
            for item in self.items:
                value = custom.get(item.identifier)
                if value is not None:
                    item.on = _parse_bool(value, item.on)

    def write_config(self, config: MutableMapping[str, Any]) -> None:
        """Store the selection mode and, for CUSTOM, each section's state."""
        search: dict[str, str] = {}
        if SEARCH_GROUP in config:
            search.update(config[SEARCH_GROUP])
        search[SCOPE_SELECTION_KEY] = str(int(self.selection))
        config[SEARCH_GROUP] = search

        if self.selection is ScopeSelection.CUSTOM:
            custom: dict[str, str] = {}
            if CUSTOM_SCOPE_GROUP in config:
                custom.update(config[CUSTOM_SCOPE_GROUP])
            for item in self.items:
                custom[item.identifier] = "true" if item.on else "false"
            config[CUSTOM_SCOPE_GROUP] = custom