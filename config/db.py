# config/db.py
"""
Process-wide database engine and session factory.

The engine is created lazily on first use and reused by every request
handler afterwards. There is no teardown beyond process exit.
"""
import logging
import threading
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from config.settings import DB_URL, DB_ECHO

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_engine() -> Engine:
    """Return the shared engine, creating it on the first call."""
    global _engine
    if _engine is None:
        with _lock:
            if _engine is None:
                _engine = create_engine(DB_URL, echo=DB_ECHO, pool_pre_ping=True, future=True)
                logger.info("Database engine created for %s", _engine.url.render_as_string(hide_password=True))
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        with _lock:
            if _session_factory is None:
                _session_factory = sessionmaker(
                    bind=get_engine(), autocommit=False, autoflush=False, expire_on_commit=False
                )
    return _session_factory


def SessionLocal() -> Session:
    return get_session_factory()()


def reset_engine(engine: Optional[Engine] = None) -> None:
    """Swap the shared engine (scripts and tests). Passing None drops it so the next call recreates it."""
    global _engine, _session_factory
    with _lock:
        if _engine is not None and _engine is not engine:
            _engine.dispose()
        _engine = engine
        _session_factory = None


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
