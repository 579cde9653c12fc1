import time

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from pinpoints.config import Settings
from pinpoints.main import create_app


@pytest.fixture(scope="session")
def rsa_key():
    """Signing key standing in for the token issuer."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def public_key(rsa_key):
    return rsa_key.public_key()


@pytest.fixture
def make_token(rsa_key):
    def _make(user="string3", drop=(), key=None, algorithm="RS256", expires_in=3600, **extra):
        now = int(time.time())
        payload = {"scopes": ["user"], "zid": user, "iat": now, "exp": now + expires_in}
        payload.update(extra)
        for name in drop:
            payload.pop(name, None)
        return jwt.encode(payload, key if key is not None else rsa_key, algorithm=algorithm)
    return _make


@pytest.fixture
def auth_headers(make_token):
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database shared by every connection of a test."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    yield engine
    engine.dispose()


@pytest.fixture
def make_settings():
    def _make(**env):
        environ = {"DATABASE_URL": "sqlite://"}
        environ.update(env)
        return Settings(environ=environ)
    return _make


@pytest.fixture
def make_client(engine, public_key, make_settings):
    def _make(**env):
        app = create_app(make_settings(**env), engine=engine, verification_key=public_key)
        return TestClient(app)
    return _make


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def id_client(make_client):
    return make_client(MARKER_SELECTOR="id")
