"""Collaborator contracts the harness observes but never owns.

An entity reference is read-only to the harness: it is reloaded and read,
never assigned. The persistence layer answers existence by identity.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class EntityReference(Protocol):
    entity_type: type

    def read(self, attribute_name: str) -> Any:
        """Return the current in-memory value; raise AttributeError if undefined."""
        ...

    def reload(self) -> None:
        ...

    def identity(self) -> Any:
        ...


@runtime_checkable
class PersistenceLayer(Protocol):
    def exists(self, entity_type: type, identity: Any) -> bool:
        ...


__all__ = ["EntityReference", "PersistenceLayer"]
