"""Functional tests for call attribution.

Verifies the per-call before/after observation, transparent forwarding of
arguments and return values, class-level interception for plain methods,
classmethods and staticmethods, and restoration of the original entry point.
"""

from __future__ import annotations

import pytest

from recordcheck.errors import DelegateConfigurationError
from recordcheck.logic.attribution import AttributionProxy, AttributionSet, AttributionTracker, intercept
from recordcheck.logic.snapshot import reload_and_capture
from recordcheck.models.delegate import DelegateDescriptor


class Person:
    pass


class PersonForm:
    def __init__(self, store, identity, **attributes):
        self.store = store
        self.identity = identity
        self.attributes = attributes
        self.label = "person-form"

    def execute(self, suffix="", *, shout=False):
        values = dict(self.attributes)
        if "name" in values:
            values["name"] = values["name"] + suffix
            if shout:
                values["name"] = values["name"].upper()
        self.store.update(Person, self.identity, **values)
        return ("saved", tuple(values))

    def rename(self, name):
        self.store.update(Person, self.identity, name=name)
        return name


class PersonService:
    @classmethod
    def call(cls, store, identity, **attributes):
        store.update(Person, identity, **attributes)
        return cls.__name__

    @staticmethod
    def run(store, identity, **attributes):
        store.update(Person, identity, **attributes)
        return "static"


def _tracker(record, names, accumulator=None):
    accumulator = accumulator if accumulator is not None else AttributionSet()
    return AttributionTracker(
        lambda: reload_and_capture(record, names),
        lambda: reload_and_capture(record, names),
        accumulator,
    )


def test_attribution_set_only_grows_and_counts_calls():
    acc = AttributionSet()
    acc.add(["age"])
    acc.add([])
    acc.add(["name", "age"])

    assert list(acc) == ["age", "name"]
    assert "age" in acc and "name" in acc
    assert len(acc) == 2
    assert acc.calls_changing("age") == 2
    assert acc.calls_changing("email") == 0


def test_tracker_forwards_arguments_and_return_value(store):
    record = store.insert(Person, 1, name="Sophia", age=20)
    tracker = _tracker(record, ["name", "age"])
    form = PersonForm(store, 1, name="Emily")

    result = tracker.forward(form.execute, "!", shout=True)

    assert result == ("saved", ("name",))
    assert record.read("name") == "EMILY!"
    assert list(tracker.accumulator) == ["name"]
    assert tracker.accumulator.calls == 1


def test_tracker_observes_only_changes_inside_the_call(store):
    record = store.insert(Person, 1, name="Sophia", age=20)
    tracker = _tracker(record, ["name", "age"])

    # Written to storage only; the in-memory record still says 20
    store.update(Person, 1, age=30)
    tracker.forward(PersonForm(store, 1, name="Emily").execute)

    assert list(tracker.accumulator) == ["name"]
    assert tracker.accumulator.calls_changing("age") == 0


def test_proxy_observes_entry_point_and_forwards_everything_else(store):
    record = store.insert(Person, 1, name="Sophia", age=20)
    tracker = _tracker(record, ["name", "age"])
    proxy = AttributionProxy(PersonForm(store, 1, age=30), tracker)

    assert proxy.label == "person-form"
    assert proxy.attributes == {"age": 30}
    assert proxy.execute() == ("saved", ("age",))
    assert list(tracker.accumulator) == ["age"]


def test_proxy_rejects_delegate_without_entry_point(store):
    record = store.insert(Person, 1, name="Sophia")

    with pytest.raises(DelegateConfigurationError):
        AttributionProxy(object(), _tracker(record, ["name"]))


def test_intercept_instruments_every_instance_and_accumulates(store):
    record = store.insert(Person, 1, name="Sophia", age=20)
    tracker = _tracker(record, ["name", "age"])

    with intercept(DelegateDescriptor(factory=PersonForm), tracker):
        PersonForm(store, 1, age=30).execute()
        PersonForm(store, 1, name="Emily").execute()

    assert list(tracker.accumulator) == ["age", "name"]
    assert tracker.accumulator.calls == 2


def test_intercept_restores_original_entry_point(store):
    record = store.insert(Person, 1, name="Sophia")
    original = PersonForm.__dict__["execute"]

    with intercept(DelegateDescriptor(factory=PersonForm), _tracker(record, ["name"])):
        assert PersonForm.__dict__["execute"] is not original

    assert PersonForm.__dict__["execute"] is original
    PersonForm(store, 1, name="Emily").execute()
    # Calls after the block are not observed by anyone
    assert record.read("name") == "Sophia"


def test_intercept_restores_entry_point_when_action_raises(store):
    record = store.insert(Person, 1, name="Sophia")
    original = PersonForm.__dict__["execute"]

    with pytest.raises(RuntimeError):
        with intercept(DelegateDescriptor(factory=PersonForm), _tracker(record, ["name"])):
            raise RuntimeError("boom")

    assert PersonForm.__dict__["execute"] is original


def test_intercept_handles_classmethod_and_staticmethod(store):
    record = store.insert(Person, 1, name="Sophia", age=20)
    tracker = _tracker(record, ["name", "age"])

    with intercept(DelegateDescriptor(factory=PersonService, entry_point="call"), tracker):
        assert PersonService.call(store, 1, age=30) == "PersonService"
    with intercept(DelegateDescriptor(factory=PersonService, entry_point="run"), tracker):
        assert PersonService.run(store, 1, name="Emily") == "static"

    assert list(tracker.accumulator) == ["age", "name"]
    assert isinstance(PersonService.__dict__["call"], classmethod)
    assert isinstance(PersonService.__dict__["run"], staticmethod)


def test_intercept_rejects_missing_entry_point(store):
    record = store.insert(Person, 1, name="Sophia")

    with pytest.raises(DelegateConfigurationError):
        with intercept(DelegateDescriptor(factory=PersonForm, entry_point="persist"), _tracker(record, ["name"])):
            pass


def test_descriptor_normalisation():
    assert DelegateDescriptor.of(None) is None
    d = DelegateDescriptor.of(PersonForm)
    assert (d.factory, d.entry_point, d.name) == (PersonForm, "execute", "PersonForm")
    assert DelegateDescriptor.of(d) is d
    assert DelegateDescriptor.of(d, "save").entry_point == "save"
    with pytest.raises(ValueError):
        DelegateDescriptor(factory=PersonForm, entry_point="not valid")


def test_intercept_instruments_several_entry_points(store):
    record = store.insert(Person, 1, name="Sophia", age=20)
    tracker = _tracker(record, ["name", "age"])
    descriptor = DelegateDescriptor(factory=PersonForm, entry_point=("execute", "rename"))

    with intercept(descriptor, tracker):
        form = PersonForm(store, 1, age=30)
        form.execute()
        assert form.rename("Emily") == "Emily"

    assert list(tracker.accumulator) == ["age", "name"]
    assert tracker.accumulator.calls == 2
    assert PersonForm.__dict__["rename"].__name__ == "rename"
    assert not hasattr(PersonForm.__dict__["rename"], "__wrapped__")


def test_intercept_leaves_class_untouched_when_one_entry_point_is_missing(store):
    record = store.insert(Person, 1, name="Sophia")
    original = PersonForm.__dict__["execute"]

    with pytest.raises(DelegateConfigurationError):
        with intercept(
            DelegateDescriptor(factory=PersonForm, entry_point=("execute", "persist")),
            _tracker(record, ["name"]),
        ):
            pass

    assert PersonForm.__dict__["execute"] is original


def test_proxy_observes_each_listed_entry_point(store):
    record = store.insert(Person, 1, name="Sophia", age=20)
    tracker = _tracker(record, ["name", "age"])
    proxy = AttributionProxy(PersonForm(store, 1, age=30), tracker, entry_point=("execute", "rename"))

    proxy.execute()
    proxy.rename("Emily")

    assert list(tracker.accumulator) == ["age", "name"]
    assert tracker.accumulator.calls == 2


def test_descriptor_accepts_several_entry_points():
    d = DelegateDescriptor.of(PersonForm, ["rename", "execute", "rename"])

    assert d.entry_points == ("rename", "execute")
    assert d.entry_point == "rename"
    assert DelegateDescriptor.of(d, ("rename", "execute")) is d
    with pytest.raises(ValueError):
        DelegateDescriptor(factory=PersonForm, entry_point=())
