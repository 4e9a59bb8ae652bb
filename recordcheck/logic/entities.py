"""Resolve caller-supplied records into entity references."""

from __future__ import annotations

from typing import Any

from recordcheck.errors import ConfigurationError
from recordcheck.logic.repository_records import SqlAlchemyRecord, is_mapped_instance
from recordcheck.models.entity import EntityReference, PersistenceLayer


def as_entity_reference(entity: Any) -> EntityReference:
    """Return ``entity`` itself if it already satisfies the contract.

    Mapped SQLAlchemy instances are wrapped in ``SqlAlchemyRecord``.
    """
    if isinstance(entity, EntityReference):
        return entity
    if is_mapped_instance(entity):
        return SqlAlchemyRecord(entity)
    raise ConfigurationError(
        f"cannot observe {type(entity).__name__}: expected a mapped SQLAlchemy instance "
        "or an object with entity_type, read(), reload() and identity()"
    )


def resolve_persistence(entity: EntityReference, persistence: PersistenceLayer | None) -> PersistenceLayer:
    if persistence is not None:
        return persistence
    if isinstance(entity, PersistenceLayer):
        return entity
    raise ConfigurationError(
        f"{type(entity).__name__} cannot answer existence checks; pass persistence=..."
    )


__all__ = ["as_entity_reference", "resolve_persistence"]
