"""Snapshot comparison.

Classifies each expected attribute as unchanged, changed to the expected
value, or changed to something else. The engine only classifies; whether a
classification fails an assertion is decided by the orchestrator.

Equality policies:
- ``native``: the values' own ``==``. ``"30"`` and ``30`` are unequal,
  ``1`` and ``1.0`` are equal.
- ``strict``: additionally requires both values to have the same type, so
  ``1`` and ``1.0`` (or ``True`` and ``1``) are unequal.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping

from recordcheck.errors import ConfigurationError
from recordcheck.models.snapshot import ChangeRecord, Snapshot

Equality = Callable[[Any, Any], bool]


def native_equals(left: Any, right: Any) -> bool:
    return bool(left == right)


def strict_equals(left: Any, right: Any) -> bool:
    return type(left) is type(right) and bool(left == right)


_POLICIES: Dict[str, Equality] = {
    "native": native_equals,
    "strict": strict_equals,
}


def equality_for(mode: str) -> Equality:
    try:
        return _POLICIES[mode]
    except KeyError:
        raise ConfigurationError(f"unknown comparison mode {mode!r}; expected one of {sorted(_POLICIES)}") from None


def changed_names(before: Snapshot, after: Snapshot, equals: Equality = native_equals) -> List[str]:
    """Names present in both snapshots whose values differ, in ``before`` order."""
    return [name for name in before if name in after and not equals(before[name], after[name])]


def compare(
    initial: Snapshot,
    final: Snapshot,
    expected: Mapping[str, Any],
    equals: Equality = native_equals,
) -> List[ChangeRecord]:
    records: List[ChangeRecord] = []
    for name, expected_value in expected.items():
        initial_value = initial[name]
        final_value = final[name]
        records.append(
            ChangeRecord(
                name=name,
                initial=initial_value,
                final=final_value,
                expected=expected_value,
                changed=not equals(initial_value, final_value),
                matches=equals(final_value, expected_value),
            )
        )
    return records


def mismatched(records: Iterable[ChangeRecord]) -> List[ChangeRecord]:
    return [r for r in records if not r.matches]


def changed(records: Iterable[ChangeRecord]) -> List[ChangeRecord]:
    return [r for r in records if r.changed]


__all__ = [
    "Equality",
    "native_equals",
    "strict_equals",
    "equality_for",
    "changed_names",
    "compare",
    "mismatched",
    "changed",
]
