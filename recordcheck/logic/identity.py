"""Record identity comparison.

Two records denote the same row when the actual one is a kind of the
expected record's type (subclasses included) and their primary keys agree.
"""

from __future__ import annotations

import logging
from typing import Any

from recordcheck.logic import messages
from recordcheck.logic.entities import as_entity_reference
from recordcheck.models.entity import EntityReference
from recordcheck.models.verdict import Verdict

logger = logging.getLogger(__name__)


def _kind(record: Any) -> type:
    if isinstance(record, EntityReference):
        return record.entity_type
    return type(record)


def match_record(actual: Any, expected: Any) -> Verdict:
    expected_kind = _kind(expected)
    actual_kind = _kind(actual)
    if not issubclass(actual_kind, expected_kind):
        logger.info("record_match_kind_mismatch expected=%s actual=%s", expected_kind.__name__, actual_kind.__name__)
        return Verdict.failure(messages.wrong_kind(expected_kind, actual_kind))

    expected_id = as_entity_reference(expected).identity()
    actual_id = as_entity_reference(actual).identity()
    if expected_id != actual_id:
        logger.info("record_match_identity_mismatch expected=%s actual=%s", expected_id, actual_id)
        return Verdict.failure(messages.wrong_identity(expected_id, actual_id))
    return Verdict.success()


__all__ = ["match_record"]
