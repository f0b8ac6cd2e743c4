"""
Pytest configuration and fixtures
"""
import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

# Settings are cached on first import, so the test environment goes in first
_test_db_dir = tempfile.mkdtemp(prefix="lawdesk-tests-")
os.environ["SQLALCHEMY_DATABASE_URL"] = f"sqlite:///{Path(_test_db_dir) / 'lawdesk_test.db'}"
os.environ["LOG_FILE_ENABLED"] = "false"
os.environ["ENABLE_TRACING"] = "false"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["APP_ENV"] = "test"

from sqlalchemy.orm import Session  # noqa: E402

from lawdesk.core.database import Base, SessionLocal, engine  # noqa: E402


@pytest.fixture(scope="function")
def db() -> Session:
    """Database session on a freshly created schema"""
    import lawdesk.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def client(db: Session):
    """Test client whose requests share the test session"""
    from contextlib import contextmanager

    from fastapi.testclient import TestClient

    from lawdesk.core.database import get_db, get_session_opener
    from main import app

    def override_get_db():
        yield db

    @contextmanager
    def shared_session():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_opener] = lambda: shared_session
    test_client = TestClient(app, follow_redirects=False)
    yield test_client
    app.dependency_overrides.clear()
