"""In-memory persistence layer (test/dev only).

Holds rows in an injectable store keyed by entity type and identity so that
harness behaviour can be exercised without a database. Records keep their
own copy of the row; like an ORM instance they go stale until reloaded.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class MemoryStore:
    def __init__(self) -> None:
        self._tables: Dict[type, Dict[Any, Dict[str, Any]]] = {}

    def _table(self, entity_type: type) -> Dict[Any, Dict[str, Any]]:
        return self._tables.setdefault(entity_type, {})

    def insert(self, entity_type: type, identity: Any, **attributes: Any) -> "MemoryRecord":
        table = self._table(entity_type)
        if identity in table:
            raise KeyError(f"{entity_type.__name__} {identity!r} already exists")
        table[identity] = dict(attributes)
        return MemoryRecord(self, entity_type, identity)

    def fetch(self, entity_type: type, identity: Any) -> Optional[Dict[str, Any]]:
        row = self._table(entity_type).get(identity)
        return dict(row) if row is not None else None

    def update(self, entity_type: type, identity: Any, **attributes: Any) -> None:
        row = self._table(entity_type).get(identity)
        if row is None:
            raise KeyError(f"{entity_type.__name__} {identity!r} does not exist")
        row.update(attributes)

    def delete(self, entity_type: type, identity: Any) -> bool:
        table = self._table(entity_type)
        existed = identity in table
        table.pop(identity, None)
        return existed

    def exists(self, entity_type: type, identity: Any) -> bool:
        return identity in self._table(entity_type)


class MemoryRecord:
    def __init__(self, store: MemoryStore, entity_type: type, identity: Any) -> None:
        self.store = store
        self.entity_type = entity_type
        self._identity = identity
        self._values: Dict[str, Any] = store.fetch(entity_type, identity) or {}

    def read(self, attribute_name: str) -> Any:
        try:
            return self._values[attribute_name]
        except KeyError:
            raise AttributeError(attribute_name) from None

    def reload(self) -> None:
        row = self.store.fetch(self.entity_type, self._identity)
        if row is None:
            raise LookupError(f"{self.entity_type.__name__} {self._identity!r} no longer exists")
        self._values = row

    def identity(self) -> Any:
        return self._identity

    def exists(self, entity_type: type, identity: Any) -> bool:
        return self.store.exists(entity_type, identity)


__all__ = ["MemoryStore", "MemoryRecord"]
