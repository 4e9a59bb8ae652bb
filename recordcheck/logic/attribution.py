"""Call attribution for delegate-driven mutations.

A tracker wraps one forwarded call with a before/after observation of the
subject entity and adds every attribute that differs to a shared
``AttributionSet``. Two interception points feed the same tracker:

- ``AttributionProxy`` decorates a single delegate instance whose entry
  point the caller invokes directly.
- ``intercept`` instruments the entry point on the delegate class for the
  duration of a ``with`` block, so every instance the action constructs is
  observed, however many instances and calls there are.

Measurement is per call: only the interception point knows when control
enters and leaves the sanctioned path.
"""

from __future__ import annotations

import functools
import inspect
import logging
from contextlib import ExitStack, contextmanager
from typing import Any, Callable, Generator, Iterable, Iterator
from unittest import mock

from recordcheck.errors import DelegateConfigurationError
from recordcheck.logic.diff_engine import Equality, changed_names, native_equals
from recordcheck.models.delegate import DEFAULT_ENTRY_POINT, DelegateDescriptor, EntryPoints, normalise_entry_points
from recordcheck.models.snapshot import Snapshot

logger = logging.getLogger(__name__)

Observer = Callable[[], Snapshot]


class AttributionSet:
    """Grow-only set of attribute names, kept in first-seen order."""

    def __init__(self) -> None:
        # name -> number of observed calls that changed it
        self._names: dict[str, int] = {}
        self.calls = 0

    def add(self, names: Iterable[str]) -> None:
        for name in names:
            self._names[name] = self._names.get(name, 0) + 1

    def calls_changing(self, name: str) -> int:
        return self._names.get(name, 0)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"AttributionSet({list(self._names)!r})"


class AttributionTracker:
    """Observe the subject around forwarded calls and accumulate changes.

    Both observers must consult the persistence layer (reload, or probe).
    The action may write to storage before or after the delegate call without
    touching the in-memory subject, and only the difference across the call
    itself may be credited to the delegate.
    """

    def __init__(
        self,
        observe_before: Observer,
        observe_after: Observer,
        accumulator: AttributionSet,
        equals: Equality = native_equals,
    ) -> None:
        self._observe_before = observe_before
        self._observe_after = observe_after
        self.accumulator = accumulator
        self._equals = equals

    def forward(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        before = self._observe_before()
        result = func(*args, **kwargs)
        after = self._observe_after()
        names = changed_names(before, after, self._equals)
        self.accumulator.calls += 1
        self.accumulator.add(names)
        logger.debug(
            "attributed_call func=%s changed=%s",
            getattr(func, "__qualname__", repr(func)),
            names,
        )
        return result


class AttributionProxy:
    """Decorator around one delegate instance.

    Calls to the entry points are observed; every other attribute access is
    forwarded to the wrapped delegate unchanged.
    """

    def __init__(
        self, delegate: Any, tracker: AttributionTracker, entry_point: EntryPoints = DEFAULT_ENTRY_POINT
    ) -> None:
        entry_points = normalise_entry_points(entry_point)
        for name in entry_points:
            if not callable(getattr(delegate, name, None)):
                raise DelegateConfigurationError(f"{type(delegate).__name__} does not implement {name!r}")
        self._delegate = delegate
        self._tracker = tracker
        self._entry_points = entry_points

    def __getattr__(self, name: str) -> Any:
        # Own slots are never forwarded; avoids recursion before __init__ ran
        if name in {"_delegate", "_tracker", "_entry_points"}:
            raise AttributeError(name)
        target = getattr(self._delegate, name)
        if name not in self._entry_points:
            return target

        @functools.wraps(target)
        def observed(*args: Any, **kwargs: Any) -> Any:
            return self._tracker.forward(target, *args, **kwargs)

        return observed

    def __repr__(self) -> str:
        return f"AttributionProxy({self._delegate!r})"


def _instrumented(raw: Any, tracker: AttributionTracker, label: str) -> Any:
    """Build a replacement class attribute that forwards through the tracker."""
    if isinstance(raw, staticmethod):
        func = raw.__func__

        @functools.wraps(func)
        def static_wrapper(*args: Any, **kwargs: Any) -> Any:
            return tracker.forward(func, *args, **kwargs)

        return staticmethod(static_wrapper)

    if isinstance(raw, classmethod):
        func = raw.__func__

        @functools.wraps(func)
        def class_wrapper(cls: type, *args: Any, **kwargs: Any) -> Any:
            return tracker.forward(func, cls, *args, **kwargs)

        return classmethod(class_wrapper)

    if inspect.isfunction(raw):

        @functools.wraps(raw)
        def method_wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            return tracker.forward(raw, self, *args, **kwargs)

        return method_wrapper

    raise DelegateConfigurationError(
        f"{label} is not a function, staticmethod or classmethod"
    )


@contextmanager
def intercept(descriptor: DelegateDescriptor, tracker: AttributionTracker) -> Generator[None, None, None]:
    """Instrument every entry point of ``descriptor.factory`` while active.

    All entry points are resolved before any is patched, so a misconfigured
    descriptor leaves the class untouched.
    """
    replacements = {}
    for entry_point in descriptor.entry_points:
        try:
            raw = inspect.getattr_static(descriptor.factory, entry_point)
        except AttributeError:
            raise DelegateConfigurationError(f"{descriptor.name} does not define {entry_point!r}") from None
        replacements[entry_point] = _instrumented(raw, tracker, f"{descriptor.name}.{entry_point}")
    logger.debug(
        "delegate_intercept_start delegate=%s entry_points=%s", descriptor.name, list(descriptor.entry_points)
    )
    with ExitStack() as stack:
        for entry_point, replacement in replacements.items():
            stack.enter_context(mock.patch.object(descriptor.factory, entry_point, replacement))
        yield
    logger.debug(
        "delegate_intercept_end delegate=%s calls=%s attributed=%s",
        descriptor.name,
        tracker.accumulator.calls,
        list(tracker.accumulator),
    )


__all__ = [
    "Observer",
    "AttributionSet",
    "AttributionTracker",
    "AttributionProxy",
    "intercept",
]
