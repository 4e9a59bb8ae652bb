"""Point-in-time attribute capture and per-attribute change records."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Dict, Iterator

from pydantic import BaseModel, ConfigDict


class Snapshot(Mapping):
    """Immutable, ordered mapping of attribute name to captured value."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values = MappingProxyType(dict(values or {}))

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Snapshot({dict(self._values)!r})"

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)


class ChangeRecord(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    initial: Any = None
    final: Any = None
    expected: Any = None
    changed: bool
    matches: bool


__all__ = ["Snapshot", "ChangeRecord"]
