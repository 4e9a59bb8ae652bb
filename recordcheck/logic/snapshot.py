"""Attribute snapshots of an observed entity."""

from __future__ import annotations

from typing import Iterable

from recordcheck.errors import UnknownAttributeError
from recordcheck.models.entity import EntityReference
from recordcheck.models.snapshot import Snapshot


def capture(entity: EntityReference, attribute_names: Iterable[str]) -> Snapshot:
    """Read each named attribute from the entity's current in-memory state.

    No reload happens here; callers reload first when they need the
    persisted truth. An attribute the entity does not define is a
    configuration error, not a verdict failure.
    """
    values = {}
    for name in attribute_names:
        try:
            values[name] = entity.read(name)
        except AttributeError:
            raise UnknownAttributeError(entity.entity_type.__name__, name) from None
    return Snapshot(values)


def reload_and_capture(entity: EntityReference, attribute_names: Iterable[str]) -> Snapshot:
    entity.reload()
    return capture(entity, attribute_names)


__all__ = ["capture", "reload_and_capture"]
