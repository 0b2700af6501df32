import os
import sys
import tempfile
from pathlib import Path

# Settings are read at import time, so the environment is fixed before any tunetip import
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{(Path(tempfile.gettempdir()) / 'tunetip-test.sqlite').as_posix()}"
os.environ["REDIS_URL"] = "redis://127.0.0.1:1/0"

_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from tests.support import factories as test_factories
from tunetip.core.security import create_access_token
from tunetip.db.base import Base, import_models
from tunetip.db.session import build_engine, get_db


@pytest.fixture
def engine(tmp_path):
    """A fresh SQLite file per test."""
    import_models()
    db_engine = build_engine(f"sqlite:///{(tmp_path / 'test.sqlite').as_posix()}")
    Base.metadata.create_all(bind=db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=True)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    test_factories.set_session(session)
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        test_factories.reset_session()


@pytest.fixture
def factories(db_session):
    yield test_factories


@pytest.fixture
def client(session_factory, db_session):
    from tunetip.main import app

    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token({"sub": user.username})
        return {"Authorization": f"Bearer {token}"}

    return _headers
