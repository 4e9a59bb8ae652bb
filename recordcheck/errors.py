"""Exception types raised by the harness.

Two families exist and they never mix:

- ``ConfigurationError`` (a ``ValueError``) signals misuse of the harness:
  an attribute that is not defined on the entity, a missing action, a
  delegate descriptor that cannot be instrumented. These are raised
  immediately and are never folded into a verdict.
- ``RecordAssertionError`` (an ``AssertionError``) is raised only by the
  pytest-facing helpers in ``recordcheck.expectations`` when a verdict is a
  failure, so the host runner reports it as a test failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from recordcheck.models.verdict import Verdict


class ConfigurationError(ValueError):
    pass


class UnknownAttributeError(ConfigurationError):
    def __init__(self, entity_type: str, attribute_name: str) -> None:
        self.entity_type = entity_type
        self.attribute_name = attribute_name
        super().__init__(f"{entity_type} does not define attribute {attribute_name!r}")


class MissingActionError(ConfigurationError):
    pass


class CheckAlreadyRunError(ConfigurationError):
    pass


class DelegateConfigurationError(ConfigurationError):
    pass


class RecordAssertionError(AssertionError):
    """Failed verdict surfaced to the host test runner."""

    def __init__(self, verdict: "Verdict") -> None:
        self.verdict = verdict
        super().__init__(verdict.message or "record assertion failed")


__all__ = [
    "ConfigurationError",
    "UnknownAttributeError",
    "MissingActionError",
    "CheckAlreadyRunError",
    "DelegateConfigurationError",
    "RecordAssertionError",
]
