"""Durable key-value store abstractions."""

from dataclasses import dataclass
from typing import Protocol


class KeyValueStore(Protocol):
    """String key-value storage, e.g. device storage or a database table."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value, if present."""

    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    def remove_item(self, key: str) -> None:
        """Delete a value; missing keys are ignored."""


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Process-local key-value store."""

    _items: dict[str, str]

    def __init__(self) -> None:
        self._items = {}

    def get_item(self, key: str) -> str | None:
        """Return the stored value, if present."""
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store a value."""
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        """Delete a value if present."""
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        """Return all stored keys."""
        return list(self._items)
