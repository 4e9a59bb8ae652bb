"""Delegate contract and descriptor.

A delegate is the sanctioned path a mutation is supposed to travel through,
such as a form or service object. The harness observes calls on its entry
points: ``execute`` unless the descriptor names others. A form whose update
is split over several methods (``update_age`` then ``update_name``) is
described with all of them.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, Tuple, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

DEFAULT_ENTRY_POINT = "execute"

EntryPoints = Union[str, Sequence[str]]


@runtime_checkable
class Delegate(Protocol):
    def execute(self, *args: Any, **kwargs: Any) -> Any:
        ...


def normalise_entry_points(entry_point: EntryPoints) -> Tuple[str, ...]:
    if isinstance(entry_point, str):
        return (entry_point,)
    return tuple(entry_point)


class DelegateDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    factory: type
    entry_points: Tuple[str, ...] = (DEFAULT_ENTRY_POINT,)

    @model_validator(mode="before")
    @classmethod
    def accept_entry_point_keyword(cls, data: Any) -> Any:
        if isinstance(data, dict) and "entry_point" in data:
            data = dict(data)
            data["entry_points"] = normalise_entry_points(data.pop("entry_point"))
        return data

    @field_validator("entry_points")
    @classmethod
    def entry_points_must_be_identifiers(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        if not v:
            raise ValueError("at least one entry point is required")
        for name in v:
            if not name.isidentifier():
                raise ValueError(f"entry point {name!r} must be a valid attribute name")
        # Order kept, duplicates dropped
        return tuple(dict.fromkeys(v))

    @property
    def entry_point(self) -> str:
        return self.entry_points[0]

    @property
    def name(self) -> str:
        return self.factory.__name__

    @classmethod
    def of(
        cls,
        delegate: "type | DelegateDescriptor | None",
        entry_point: EntryPoints | None = None,
    ) -> "DelegateDescriptor | None":
        """Normalise a class or descriptor into a descriptor (None stays None)."""
        if delegate is None:
            return None
        if isinstance(delegate, DelegateDescriptor):
            if entry_point is None or normalise_entry_points(entry_point) == delegate.entry_points:
                return delegate
            return cls(factory=delegate.factory, entry_point=entry_point)
        return cls(factory=delegate, entry_point=entry_point or DEFAULT_ENTRY_POINT)


__all__ = ["DEFAULT_ENTRY_POINT", "Delegate", "DelegateDescriptor", "EntryPoints", "normalise_entry_points"]
