"""Database bootstrap utilities for the harness.

Exposes engine/session construction used by the SQLAlchemy entity adapter.
The harness never defines ORM models of its own.
"""

from recordcheck.db.base import get_engine, get_sessionmaker, session_scope

__all__ = [
    "get_engine",
    "get_sessionmaker",
    "session_scope",
]
