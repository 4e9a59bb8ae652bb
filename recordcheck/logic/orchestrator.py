"""Assertion orchestration for update- and destroy-style record checks.

Both flavours share one protocol: arm (instrument the delegate if one is
designated), execute the caller's action exactly once, observe the entity
again through the persistence layer, and turn the observations into a
``Verdict``. Misuse of the harness raises ``ConfigurationError``; a system
under test that misbehaves yields a failed verdict, never an exception.

A check object is single-use. Its attribution set, snapshots and change
records belong to that one run.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager, nullcontext
from enum import Enum
from typing import Any, Callable, ContextManager, Dict, Iterator, List, Mapping, Optional

from recordcheck.config import load_config
from recordcheck.errors import CheckAlreadyRunError, ConfigurationError, MissingActionError
from recordcheck.logic import messages
from recordcheck.logic.attribution import AttributionProxy, AttributionSet, AttributionTracker, intercept
from recordcheck.logic.diff_engine import changed, compare, equality_for, mismatched
from recordcheck.logic.entities import as_entity_reference, resolve_persistence
from recordcheck.logic.existence import EXISTS, ExistenceProbe
from recordcheck.logic.snapshot import capture, reload_and_capture
from recordcheck.models.delegate import DEFAULT_ENTRY_POINT, Delegate, DelegateDescriptor, EntryPoints
from recordcheck.models.entity import PersistenceLayer
from recordcheck.models.snapshot import Snapshot
from recordcheck.models.verdict import Verdict

logger = logging.getLogger(__name__)

Action = Callable[[], Any]


class CheckState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    EXECUTING = "executing"
    DIFFING = "diffing"
    VERIFYING = "verifying"
    VERDICT = "verdict"


class RecordCheck:
    """Shared state machine; subclasses supply the observation and policy."""

    flavour = "record"

    def __init__(
        self,
        entity: Any,
        delegate: "type | DelegateDescriptor | None" = None,
        *,
        entry_point: Optional[EntryPoints] = None,
        comparison: Optional[str] = None,
    ) -> None:
        self.entity = as_entity_reference(entity)
        self.delegate = DelegateDescriptor.of(delegate, entry_point)
        self._equals = equality_for(comparison or load_config().comparison.mode)
        self.attribution = AttributionSet()
        self.state = CheckState.IDLE
        self.verdict: Optional[Verdict] = None
        self._proxied_name: Optional[str] = None
        self._tracker: Optional[AttributionTracker] = None

    # -- configuration -------------------------------------------------

    def using(self, delegate: "type | DelegateDescriptor", entry_point: Optional[EntryPoints] = None) -> "RecordCheck":
        """Designate the sanctioned delegate path; returns self for chaining."""
        self._require_idle()
        self.delegate = DelegateDescriptor.of(delegate, entry_point)
        return self

    def attributed(self, delegate: "Delegate | Any", entry_point: EntryPoints = DEFAULT_ENTRY_POINT) -> AttributionProxy:
        """Wrap a delegate instance the action will call directly.

        Calling this designates the instance's type as the sanctioned path
        when no delegate class was given. It may be called before the run or
        from inside the observed block.
        """
        if self.state not in (CheckState.IDLE, CheckState.EXECUTING):
            raise CheckAlreadyRunError(f"{self.flavour} check already reached {self.state.value}")
        if self._proxied_name is None:
            self._proxied_name = type(delegate).__name__
        return AttributionProxy(delegate, self.tracker, entry_point=entry_point)

    @property
    def tracker(self) -> AttributionTracker:
        if self._tracker is None:
            self._tracker = AttributionTracker(
                self._observe_before,
                self._observe_after,
                self.attribution,
                self._equals,
            )
        return self._tracker

    @property
    def attribution_enabled(self) -> bool:
        return self.delegate is not None or self._proxied_name is not None

    @property
    def delegate_name(self) -> str:
        if self.delegate is not None:
            return self.delegate.name
        return self._proxied_name or ""

    # -- protocol --------------------------------------------------------

    def run(self, action: Action) -> Verdict:
        """Invoke ``action`` exactly once under observation and return the verdict."""
        self._require_idle()
        if action is None or not callable(action):
            raise MissingActionError(f"{self.flavour} check requires a callable action")
        with self.observing():
            action()
        return self.verdict

    __call__ = run

    @contextmanager
    def observing(self) -> Iterator["RecordCheck"]:
        """Treat the body of a ``with`` block as the action.

        The verdict is available on ``self.verdict`` once the block exits
        normally. An exception raised by the body propagates and no verdict
        is produced.
        """
        self._require_idle()
        self._transition(CheckState.ARMED)
        with self._armed():
            self._transition(CheckState.EXECUTING)
            self._before_action()
            try:
                yield self
            except Exception as exc:
                # The host runner reports the traceback
                logger.debug("%s_check_action_failed entity=%s error=%r", self.flavour, self._label(), exc)
                raise
        verdict = self._conclude()
        self.verdict = verdict
        self._transition(CheckState.VERDICT)
        logger.info(
            "%s_check_verdict entity=%s passed=%s",
            self.flavour,
            self._label(),
            verdict.passed,
        )

    def _armed(self) -> ContextManager[None]:
        if self.delegate is None:
            return nullcontext()
        return intercept(self.delegate, self.tracker)

    def _require_idle(self) -> None:
        if self.state is not CheckState.IDLE:
            raise CheckAlreadyRunError(f"{self.flavour} check objects run once; create a new one")

    def _transition(self, state: CheckState) -> None:
        logger.debug("%s_check_state entity=%s %s->%s", self.flavour, self._label(), self.state.value, state.value)
        self.state = state

    def _label(self) -> str:
        return f"{self.entity.entity_type.__name__}:{self.entity.identity()}"

    # -- hooks -----------------------------------------------------------

    def _observe_before(self) -> Snapshot:  # pragma: no cover - abstract
        raise NotImplementedError

    def _observe_after(self) -> Snapshot:  # pragma: no cover - abstract
        raise NotImplementedError

    def _before_action(self) -> None:  # pragma: no cover - abstract
        raise NotImplementedError

    def _conclude(self) -> Verdict:  # pragma: no cover - abstract
        raise NotImplementedError


class UpdateRecordCheck(RecordCheck):
    """Expect the entity's attributes to end at the expected values.

    With a delegate designated, every attribute that changed must also have
    changed inside a call on that delegate.
    """

    flavour = "update"

    def __init__(self, entity: Any, expected: Mapping[str, Any], delegate=None, **kwargs: Any) -> None:
        super().__init__(entity, delegate, **kwargs)
        if not expected:
            raise ConfigurationError("update check requires at least one expected attribute")
        for name in expected:
            if not isinstance(name, str):
                raise ConfigurationError(f"attribute names must be strings, got {name!r}")
        self.expected: Dict[str, Any] = dict(expected)
        self.initial: Optional[Snapshot] = None
        self.final: Optional[Snapshot] = None

    def _observe_before(self) -> Snapshot:
        # Writes made to storage earlier in the action must not count as the delegate's
        return reload_and_capture(self.entity, self.expected)

    def _observe_after(self) -> Snapshot:
        return reload_and_capture(self.entity, self.expected)

    def _before_action(self) -> None:
        self.initial = capture(self.entity, self.expected)
        logger.info("update_check_start entity=%s attributes=%s", self._label(), list(self.expected))

    def _conclude(self) -> Verdict:
        self.final = reload_and_capture(self.entity, self.expected)
        self._transition(CheckState.DIFFING)
        records = compare(self.initial, self.final, self.expected, self._equals)

        paragraphs: List[str] = []
        entity_type = self.entity.entity_type
        identity = self.entity.identity()
        wrong = mismatched(records)
        if wrong:
            paragraphs.append(messages.not_properly_changed(entity_type, identity, wrong))

        unattributed: List[str] = []
        if self.attribution_enabled:
            unattributed = [r.name for r in changed(records) if r.name not in self.attribution]
            if unattributed:
                paragraphs.append(
                    messages.changed_by_other_means(entity_type, identity, self.delegate_name, unattributed)
                )
        logger.info(
            "update_check_diff entity=%s mismatched=%s unattributed=%s delegate_calls=%s",
            self._label(),
            [r.name for r in wrong],
            unattributed,
            self.attribution.calls,
        )

        message = messages.join_paragraphs(paragraphs)
        if message is None:
            return Verdict.success(changes=records)
        return Verdict.failure(message, changes=records, unattributed=unattributed)


class DestroyRecordCheck(RecordCheck):
    """Expect the entity to exist before the action and be gone after it.

    With a delegate designated, the delegate must have been called and every
    call on it must have observed the record disappear; that check runs
    first and its message is reported alone.
    """

    flavour = "destroy"

    def __init__(self, entity: Any, delegate=None, *, persistence: PersistenceLayer | None = None, **kwargs: Any) -> None:
        super().__init__(entity, delegate, **kwargs)
        self.probe = ExistenceProbe(
            resolve_persistence(self.entity, persistence),
            self.entity.entity_type,
            self.entity.identity(),
        )
        self.existed_before: Optional[bool] = None
        self.exists_after: Optional[bool] = None

    def _observe_before(self) -> Snapshot:
        return self.probe.capture()

    def _observe_after(self) -> Snapshot:
        return self.probe.capture()

    def _before_action(self) -> None:
        self.existed_before = self.probe.exists()
        if not self.existed_before:
            logger.warning("destroy_check_precondition_unmet entity=%s exists_before=False", self._label())
        logger.info("destroy_check_start entity=%s", self._label())

    def _destroyed_through_delegate(self) -> bool:
        calls = self.attribution.calls
        return calls > 0 and self.attribution.calls_changing(EXISTS) == calls

    def _conclude(self) -> Verdict:
        self._transition(CheckState.VERIFYING)
        self.exists_after = self.probe.exists()
        entity_type = self.entity.entity_type
        logger.info(
            "destroy_check_verify entity=%s existed_before=%s exists_after=%s delegate_calls=%s",
            self._label(),
            self.existed_before,
            self.exists_after,
            self.attribution.calls,
        )
        if self.attribution_enabled and not self._destroyed_through_delegate():
            return Verdict.failure(messages.not_destroyed_with_service(entity_type, self.delegate_name))
        if not self.existed_before or self.exists_after:
            return Verdict.failure(messages.not_destroyed(entity_type))
        return Verdict.success()


def update_record(entity: Any, expected: Mapping[str, Any] | None = None, /, **attributes: Any) -> UpdateRecordCheck:
    """Build an update check; ``.using(Form)`` designates the delegate."""
    merged: Dict[str, Any] = dict(expected or {})
    merged.update(attributes)
    return UpdateRecordCheck(entity, merged)


def destroy_record(entity: Any, *, persistence: PersistenceLayer | None = None) -> DestroyRecordCheck:
    """Build a destroy check; ``.using(Service, entry_point="call")`` designates the delegate."""
    return DestroyRecordCheck(entity, persistence=persistence)


__all__ = [
    "CheckState",
    "RecordCheck",
    "UpdateRecordCheck",
    "DestroyRecordCheck",
    "update_record",
    "destroy_record",
]
