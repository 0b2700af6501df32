# ============================================================================
# FILE: tunetip/db/session.py
# ============================================================================
from contextlib import contextmanager
from typing import Generator, Iterator
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from tunetip.config import settings
from tunetip.core.exceptions import TunetipError
import logging

logger = logging.getLogger(__name__)

def build_engine(url: str):
    """Create an engine; SQLite gets thread sharing and enforced foreign keys"""
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)

    if url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine

engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=True)

def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@contextmanager
def transaction(db: Session, action: str) -> Iterator[Session]:
    """
    Commit on success, roll back on any error and re-raise.

    Domain errors are expected outcomes and are not logged here.
    """
    try:
        yield db
        db.commit()
    except TunetipError:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error {action}: {e}")
        raise
