"""Value types shared by the harness logic."""

from recordcheck.models.delegate import DEFAULT_ENTRY_POINT, Delegate, DelegateDescriptor
from recordcheck.models.entity import EntityReference, PersistenceLayer
from recordcheck.models.snapshot import ChangeRecord, Snapshot
from recordcheck.models.verdict import Verdict

__all__ = [
    "DEFAULT_ENTRY_POINT",
    "Delegate",
    "DelegateDescriptor",
    "EntityReference",
    "PersistenceLayer",
    "ChangeRecord",
    "Snapshot",
    "Verdict",
]
