"""SQLAlchemy engine and session helpers.

The harness observes whatever database the application under test uses; it
targets SQLite in CI and any SQLAlchemy dialect otherwise. No declarative
models are defined here; this module only manages connection lifecycle for
adapters that need a session of their own.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from recordcheck.config import load_config

logger = logging.getLogger(__name__)


def _db_url() -> str:
    return os.getenv("TEST_DATABASE_URL") or load_config().database.dsn


# Module-level cached Engine so adapters share the application's connection
_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None


def get_engine(url: str | None = None) -> Engine:
    """Return a singleton SQLAlchemy Engine for the given URL.

    For SQLite in-memory URLs, use a StaticPool to keep a single connection
    alive across sessions so the observed data survives between them.
    """
    global _ENGINE, _ENGINE_URL
    resolved_url = url or _db_url()

    if _ENGINE is None or _ENGINE_URL != resolved_url:
        kwargs: dict = {"future": True, "pool_pre_ping": True}
        if resolved_url.startswith("sqlite"):
            # Observations may run on the thread serving the application under test
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in resolved_url:
                kwargs["poolclass"] = StaticPool
        if _ENGINE is not None:
            _ENGINE.dispose()
        _ENGINE = create_engine(resolved_url, **kwargs)
        _ENGINE_URL = resolved_url
        logger.info("engine_created url=%s", _ENGINE.url.render_as_string(hide_password=True))

    return _ENGINE


def get_sessionmaker(engine: Engine | None = None) -> sessionmaker:
    engine = engine or get_engine()
    return sessionmaker(bind=engine, future=True, expire_on_commit=False)


@contextmanager
def session_scope(engine: Engine | None = None) -> Generator[Session, None, None]:
    """Yield a session that commits on success and rolls back on error."""
    SessionLocal = get_sessionmaker(engine)
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.error("DB session error; transaction rolled back", exc_info=True)
        raise
    finally:
        session.close()
