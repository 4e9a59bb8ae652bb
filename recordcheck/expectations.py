"""pytest-facing assertion helpers.

Each helper treats the body of a ``with`` block as the action, runs it once
under observation and raises ``RecordAssertionError`` (an AssertionError,
so pytest reports a normal test failure) when the verdict fails::

    with expect_update(user, name="Emily", age=30, using=UserForm):
        client.post(f"/users/{user.id}", json=payload)
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional

from recordcheck.errors import RecordAssertionError
from recordcheck.logic.identity import match_record
from recordcheck.logic.orchestrator import DestroyRecordCheck, UpdateRecordCheck
from recordcheck.models.delegate import DelegateDescriptor, EntryPoints
from recordcheck.models.entity import PersistenceLayer
from recordcheck.models.verdict import Verdict


def assert_verdict(verdict: Verdict) -> Verdict:
    if not verdict.passed:
        raise RecordAssertionError(verdict)
    return verdict


@contextmanager
def expect_update(
    entity: Any,
    expected: Optional[Mapping[str, Any]] = None,
    /,
    *,
    using: "type | DelegateDescriptor | None" = None,
    entry_point: Optional[EntryPoints] = None,
    comparison: Optional[str] = None,
    **attributes: Any,
) -> Iterator[UpdateRecordCheck]:
    merged: Dict[str, Any] = dict(expected or {})
    merged.update(attributes)
    check = UpdateRecordCheck(entity, merged, using, entry_point=entry_point, comparison=comparison)
    with check.observing():
        yield check
    assert_verdict(check.verdict)


@contextmanager
def expect_destroy(
    entity: Any,
    *,
    using: "type | DelegateDescriptor | None" = None,
    entry_point: Optional[EntryPoints] = None,
    persistence: PersistenceLayer | None = None,
) -> Iterator[DestroyRecordCheck]:
    check = DestroyRecordCheck(entity, using, entry_point=entry_point, persistence=persistence)
    with check.observing():
        yield check
    assert_verdict(check.verdict)


def expect_record(actual: Any, expected: Any) -> Verdict:
    return assert_verdict(match_record(actual, expected))


__all__ = ["assert_verdict", "expect_update", "expect_destroy", "expect_record"]
