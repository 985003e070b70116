"""
Shared pytest fixtures for Chirpy tests.

- Low bcrypt cost so hashing tests stay fast
- A temporary SQLite database per test
- A FastAPI TestClient wired to that database
"""

import os
import sys
import uuid

# Must be set before chirpy.config is imported: Config reads the env at import time.
os.environ.setdefault("AUTH_BCRYPT_ROUNDS", "4")

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from fastapi.testclient import TestClient

from chirpy.api.server import create_app
from chirpy.config import load_config
from chirpy.db import connect, init_db


TEST_SECRET = "test-secret-0123456789-abcdefghijklmnop"
OTHER_SECRET = "other-secret-0123456789-abcdefghijklmno"


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def db_dsn(tmp_path):
    dsn = str(tmp_path / "chirpy.sqlite")
    init_db(dsn)
    return dsn


@pytest.fixture
def conn(db_dsn):
    with connect(db_dsn) as c:
        yield c


@pytest.fixture
def static_dir(tmp_path):
    d = tmp_path / "public"
    d.mkdir()
    (d / "index.html").write_text("<html><body>Welcome to Chirpy</body></html>")
    return d


@pytest.fixture
def make_client(tmp_path, static_dir):
    """Factory for a TestClient; keyword args override Config fields."""
    clients = []

    def _make(**overrides):
        settings = {
            "DB_DSN": str(tmp_path / "api.sqlite"),
            "PLATFORM": "dev",
            "AUTH_JWT_SECRET": TEST_SECRET,
            "AUTH_TOKEN_EXPIRE_SECONDS": 3600,
            "FILESERVER_ROOT": str(static_dir),
            "CORS_ALLOW_ORIGINS": (),
        }
        settings.update(overrides)
        client = TestClient(create_app(load_config(**settings)))
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for c in clients:
        c.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()
