"""Record-check harness.

Verifies that an action changed a persisted record to the expected values,
or destroyed it, and that the change went through the designated delegate
(a form or service object) rather than some other path. Logic lives in
`recordcheck/logic/`, value types in `recordcheck/models/` and the
pytest-facing helpers in `recordcheck.expectations`.
"""

from __future__ import annotations

from recordcheck.errors import ConfigurationError, RecordAssertionError, UnknownAttributeError
from recordcheck.expectations import assert_verdict, expect_destroy, expect_record, expect_update
from recordcheck.logic.identity import match_record
from recordcheck.logic.orchestrator import (
    DestroyRecordCheck,
    UpdateRecordCheck,
    destroy_record,
    update_record,
)
from recordcheck.logic.repository_memory import MemoryRecord, MemoryStore
from recordcheck.logic.repository_records import SqlAlchemyRecord
from recordcheck.models import ChangeRecord, DelegateDescriptor, Snapshot, Verdict

__all__ = [
    "ConfigurationError",
    "RecordAssertionError",
    "UnknownAttributeError",
    "assert_verdict",
    "expect_destroy",
    "expect_record",
    "expect_update",
    "match_record",
    "DestroyRecordCheck",
    "UpdateRecordCheck",
    "destroy_record",
    "update_record",
    "MemoryRecord",
    "MemoryStore",
    "SqlAlchemyRecord",
    "ChangeRecord",
    "DelegateDescriptor",
    "Snapshot",
    "Verdict",
]
