"""Pytest configuration and shared fixtures."""

import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Settings are read at import time, so the environment must be in place first
_db_dir = tempfile.mkdtemp(prefix="sparknest-tests-")
os.environ["JWT_SECRET_KEY"] = "test-signing-key"
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_db_dir) / 'sparknest.db'}"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["OTP_CLEANUP_INTERVAL_SECONDS"] = "0"
os.environ["BREVO_API_KEY"] = ""

from fastapi.testclient import TestClient  # noqa: E402

from sparknest.core.database import Base, SessionLocal, engine  # noqa: E402
from sparknest.main import app  # noqa: E402
from sparknest.services import auth as auth_service  # noqa: E402
from sparknest.storage import DatabaseStorage  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_database():
    """Recreate every table so each test starts from an empty database."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    with SessionLocal() as session:
        yield session


@pytest.fixture
def storage(db):
    return DatabaseStorage(db)


@pytest.fixture
def sent_codes(monkeypatch):
    """Replace the email collaborator with a recorder of (email, code) pairs."""
    sent = []

    async def fake_send(email, code):
        sent.append((email, code))

    monkeypatch.setattr(auth_service, "send_verification_code", fake_send)
    return sent


@pytest.fixture
def client(sent_codes):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def signup_payload():
    return {
        "email": "a@x.com",
        "password": "pw12345678",
        "firstName": "A",
        "lastName": "B",
    }


class BrokenSession:
    """Session stand-in whose every statement fails like a lost database connection."""

    def __init__(self):
        self.rolled_back = False

    def _fail(self, *args, **kwargs):
        from sqlalchemy.exc import OperationalError
        raise OperationalError("SELECT 1", {}, Exception("database is unavailable"))

    query = _fail
    execute = _fail
    add = _fail
    commit = _fail

    def rollback(self):
        self.rolled_back = True


@pytest.fixture
def broken_storage():
    return DatabaseStorage(BrokenSession())
