"""Existence probe for destroy-style checks.

The probe is a single-attribute observation: its snapshot holds only
``exists``, so the attribution tracker can watch the existence transition
inside a delegate call exactly as it watches ordinary attributes.
"""

from __future__ import annotations

import logging
from typing import Any

from recordcheck.models.entity import PersistenceLayer
from recordcheck.models.snapshot import Snapshot

logger = logging.getLogger(__name__)

EXISTS = "exists"


class ExistenceProbe:
    def __init__(self, persistence: PersistenceLayer, entity_type: type, identity: Any) -> None:
        self._persistence = persistence
        self.entity_type = entity_type
        self.identity = identity

    def exists(self) -> bool:
        present = bool(self._persistence.exists(self.entity_type, self.identity))
        logger.debug(
            "existence_probe entity=%s id=%s exists=%s",
            self.entity_type.__name__,
            self.identity,
            present,
        )
        return present

    def capture(self) -> Snapshot:
        return Snapshot({EXISTS: self.exists()})


__all__ = ["EXISTS", "ExistenceProbe"]
