"""
Pytest fixtures shared across all test modules.
Uses an in-memory SQLite database (StaticPool, see lounge.database) so every
connection shares a single DB; nothing touches ./data during tests.
"""

import os
import tempfile

# Set env vars BEFORE any lounge module is imported
_tmp = tempfile.mkdtemp(prefix="lounge-tests-")
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["UPLOAD_DIR"] = os.path.join(_tmp, "uploads")
os.environ["GAMES_FILE"] = os.path.join(_tmp, "games.json")

import pytest
from fastapi.testclient import TestClient

# Import lounge modules AFTER env vars are set
from lounge.database import Base, SessionLocal, engine  # noqa: E402
from lounge.main import app  # noqa: E402
from lounge.models import message  # noqa: E402,F401
from lounge.services.message_log import MessageLog  # noqa: E402
from lounge.services.presence import PresenceRegistry  # noqa: E402
from lounge.websocket.hub import ChatHub  # noqa: E402
from lounge.websocket.manager import Connection  # noqa: E402


@pytest.fixture(autouse=True)
def setup_db():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def log() -> MessageLog:
    return MessageLog(SessionLocal)


@pytest.fixture()
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture()
def hub(log, upload_dir) -> ChatHub:
    return ChatHub(PresenceRegistry(), log, upload_dir=str(upload_dir), upload_url_prefix="/uploads")


@pytest.fixture()
def connect():
    """Factory for hub-level connections (no socket; inspect with .drain())."""

    def _connect(connection_id: str | None = None, max_queue: int = 256) -> Connection:
        return Connection(connection_id=connection_id, max_queue=max_queue)

    return _connect
