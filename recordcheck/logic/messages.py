"""Centralised construction of verdict failure messages.

Checks never embed message text inline; they call the builders here so the
wording stays identical across flavours and tests can match it exactly.
Strings are rendered double-quoted, every other value with ``repr``.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, List, Sequence

from recordcheck.models.snapshot import ChangeRecord

PARAGRAPH_SEPARATOR = "\n\n"


def render_value(value: Any) -> str:
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    return repr(value)


def _attribute_phrase(count: int) -> str:
    return "attribute was" if count == 1 else "attributes were"


def _record_label(entity_type: type, identity: Any) -> str:
    return f"Expected a record of a {entity_type.__name__} class with id = {identity}"


def mismatch_line(record: ChangeRecord) -> str:
    line = f"{render_value(record.name)} from {render_value(record.initial)} to {render_value(record.expected)}"
    if record.changed:
        line += f" (it was changed to {render_value(record.final)})"
    return line


def not_properly_changed(entity_type: type, identity: Any, records: Sequence[ChangeRecord]) -> str:
    lines = [mismatch_line(r) for r in records]
    return (
        f"{_record_label(entity_type, identity)} to be updated, but the following "
        f"{_attribute_phrase(len(lines))} not properly changed:\n" + "\n".join(lines)
    )


def changed_by_other_means(
    entity_type: type, identity: Any, delegate_name: str, names: Sequence[str]
) -> str:
    lines = [render_value(name) for name in names]
    return (
        f"{_record_label(entity_type, identity)} to be updated using {delegate_name}, but the following "
        f"{_attribute_phrase(len(lines))} changed by some other means:\n" + "\n".join(lines)
    )


def not_destroyed(entity_type: type) -> str:
    return f"Expected a record of {entity_type.__name__} class to be destroyed, but was not"


def not_destroyed_with_service(entity_type: type, delegate_name: str) -> str:
    return (
        f"Expected a record of {entity_type.__name__} class to be destroyed "
        f"with service object {delegate_name}, but was not"
    )


def wrong_kind(expected_type: type, actual_type: type) -> str:
    return f"Expected the record to be kind of {expected_type.__name__} but was {actual_type.__name__} instead."


def wrong_identity(expected_identity: Any, actual_identity: Any) -> str:
    return f"Expected id of the record to eql {expected_identity} but was {actual_identity}"


def join_paragraphs(paragraphs: Iterable[str]) -> str | None:
    parts: List[str] = [p for p in paragraphs if p]
    return PARAGRAPH_SEPARATOR.join(parts) if parts else None


__all__ = [
    "render_value",
    "mismatch_line",
    "not_properly_changed",
    "changed_by_other_means",
    "not_destroyed",
    "not_destroyed_with_service",
    "wrong_kind",
    "wrong_identity",
    "join_paragraphs",
]
