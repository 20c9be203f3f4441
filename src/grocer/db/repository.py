"""SQLite engine for the key-value table."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from grocer.config import get_settings
from grocer.db.models import KeyValueORM

logger = logging.getLogger(__name__)

_sessions: Optional[sessionmaker[Session]] = None


def _open_sessions() -> sessionmaker[Session]:
    database_path = get_settings().database_path
    database_path.parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(f"sqlite:///{database_path}")
    KeyValueORM.__table__.create(engine, checkfirst=True)
    logger.debug("Opened key-value database at %s", database_path)
    return sessionmaker(bind=engine, expire_on_commit=False)


def _session_factory() -> sessionmaker[Session]:
    global _sessions
    if _sessions is None:
        _sessions = _open_sessions()
    return _sessions


def get_engine() -> Engine:
    """Engine bound to the configured database, created on first use."""

    return _session_factory().kw["bind"]


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session that commits on success and rolls back on error."""

    with _session_factory().begin() as session:
        yield session


def reset_repository_state() -> None:
    """Dispose the engine so the next call reads the settings again."""

    global _sessions
    if _sessions is not None:
        _sessions.kw["bind"].dispose()
    _sessions = None


__all__ = ["get_engine", "reset_repository_state", "session_scope"]
