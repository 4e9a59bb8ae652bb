"""SQLAlchemy-backed entity reference and existence lookups.

Adapts a mapped ORM instance to the read/reload/identity contract the
harness observes, and answers existence by primary key with a direct query
so the session's identity map never masks a delete made elsewhere.
"""

from __future__ import annotations

import logging
from typing import Any, Tuple

from sqlalchemy import and_, inspect as sa_inspect, select
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value
from sqlalchemy.orm.state import InstanceState

from recordcheck.db.base import session_scope
from recordcheck.errors import ConfigurationError

logger = logging.getLogger(__name__)


def is_mapped_instance(obj: Any) -> bool:
    return isinstance(sa_inspect(obj, raiseerr=False), InstanceState)


def _identity_tuple(identity: Any) -> Tuple[Any, ...]:
    return identity if isinstance(identity, tuple) else (identity,)


def record_exists(session: Session, entity_type: type, identity: Any) -> bool:
    """Return True if a row with the given primary key is present."""
    mapper = sa_inspect(entity_type)
    pk_cols = list(mapper.primary_key)
    ident = _identity_tuple(identity)
    if len(ident) != len(pk_cols):
        raise ConfigurationError(
            f"{entity_type.__name__} has {len(pk_cols)} primary key column(s), got identity {identity!r}"
        )
    stmt = (
        select(*pk_cols)
        .where(and_(*(col == val for col, val in zip(pk_cols, ident))))
        .limit(1)
    )
    row = session.execute(stmt).first()
    return row is not None


class SqlAlchemyRecord:
    """Entity reference over a persisted ORM instance.

    When the instance is attached to a session, reload refreshes it in place.
    Detached instances are refreshed from a short-lived session of the
    harness's own engine.
    """

    def __init__(self, instance: Any, session: Session | None = None) -> None:
        state = sa_inspect(instance, raiseerr=False)
        if not isinstance(state, InstanceState):
            raise ConfigurationError(f"{type(instance).__name__} is not a mapped instance")
        if state.identity is None:
            raise ConfigurationError(
                f"{type(instance).__name__} instance has no primary key yet; persist it before checking"
            )
        self.instance = instance
        self.entity_type: type = type(instance)
        self._state = state
        self._session = session
        self._identity: Tuple[Any, ...] = tuple(state.identity)

    @property
    def session(self) -> Session | None:
        return self._session or self._state.session

    def read(self, attribute_name: str) -> Any:
        return getattr(self.instance, attribute_name)

    def identity(self) -> Any:
        return self._identity[0] if len(self._identity) == 1 else self._identity

    def reload(self) -> None:
        session = self.session
        if session is not None:
            session.refresh(self.instance)
            return
        with session_scope() as own:
            fresh = own.get(self.entity_type, self.identity(), populate_existing=True)
            if fresh is None:
                raise LookupError(f"{self.entity_type.__name__} {self.identity()!r} no longer exists")
            for attr in self._state.mapper.column_attrs:
                set_committed_value(self.instance, attr.key, getattr(fresh, attr.key))
        logger.debug("detached_reload entity=%s id=%s", self.entity_type.__name__, self.identity())

    def exists(self, entity_type: type, identity: Any) -> bool:
        session = self.session
        if session is not None:
            return record_exists(session, entity_type, identity)
        with session_scope() as own:
            return record_exists(own, entity_type, identity)


__all__ = ["SqlAlchemyRecord", "is_mapped_instance", "record_exists"]
