"""
Registry Storage
In-memory component store keyed by (kind, identifier).
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from mcp_forge.components.types import ComponentDefinition, ComponentKind


@dataclass(frozen=True)
class RegistryItem:
    """A stored component."""
    kind: ComponentKind
    identifier: str
    definition: ComponentDefinition

    @classmethod
    def of(cls, definition: ComponentDefinition) -> "RegistryItem":
        return cls(definition.kind, definition.identifier, definition)


class InMemoryRegistryStorage:
    """Dict-backed storage. Insertion order is preserved per kind."""

    def __init__(self):
        self._items: Dict[str, RegistryItem] = {}

    @staticmethod
    def key(kind: ComponentKind, identifier: str) -> str:
        return f"{kind.value}:{identifier}"

    def get_item(self, kind: ComponentKind, identifier: str) -> Optional[RegistryItem]:
        return self._items.get(self.key(kind, identifier))

    def set_item(self, item: RegistryItem) -> bool:
        """Store an item, replacing any with the same key. Returns True if one was replaced."""
        key = self.key(item.kind, item.identifier)
        replaced = key in self._items
        self._items[key] = item
        return replaced

    def add_all(self, definitions: Iterable[ComponentDefinition]) -> List[str]:
        """Store definitions in order; returns the keys that replaced an earlier item."""
        duplicates = []
        for definition in definitions:
            item = RegistryItem.of(definition)
            if self.set_item(item):
                duplicates.append(self.key(item.kind, item.identifier))
        return duplicates

    def items_of(self, kind: ComponentKind) -> List[RegistryItem]:
        return [item for item in self._items.values() if item.kind is kind]

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
