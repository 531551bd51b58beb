"""SQLite access for the scouting store.

One sessionmaker is kept per database file, bound to an engine that
FastAPI's worker threads share. The file is PEREGRINE_DB_PATH unless a
caller names one.
"""

from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from peregrine.db.schema import Base

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path("data/peregrine.db")

_factories: dict[Path, sessionmaker[Session]] = {}
_factories_lock = threading.Lock()


def resolve_db_path(db_path: Path | str | None = None) -> Path:
    """Pick the database file: explicit argument, then env var, then default."""
    if db_path is None:
        db_path = os.environ.get("PEREGRINE_DB_PATH") or DEFAULT_DB_PATH
    return Path(db_path).resolve()


def _factory_for(db_path: Path | str | None) -> sessionmaker[Session]:
    path = resolve_db_path(db_path)
    with _factories_lock:
        factory = _factories.get(path)
        if factory is None:
            path.parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"Opening SQLite database at {path}")
            # One shared connection; SQLite rejects cross-thread use otherwise
            engine = create_engine(
                f"sqlite:///{path}",
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
            factory = sessionmaker(bind=engine)
            _factories[path] = factory
    return factory


def get_engine(db_path: Path | str | None = None) -> Engine:
    """Engine behind the session factory for this database file."""
    return _factory_for(db_path).kw["bind"]


def get_session(db_path: Path | str | None = None) -> Session:
    """Open a session. The caller closes it, or uses session_scope()."""
    return _factory_for(db_path)()


@contextmanager
def session_scope(db_path: Path | str | None = None) -> Iterator[Session]:
    """Run a unit of work: commit if the block succeeds, roll back if not."""
    session = get_session(db_path)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(db_path: Path | str | None = None) -> None:
    """Create any missing tables."""
    Base.metadata.create_all(get_engine(db_path))
