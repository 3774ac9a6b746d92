import io

import pytest

from wordnest import create_app
from wordnest.config import Config

TEST_SECRET = "test-jwt-secret-that-is-long-enough-for-hs256"
PASSWORD = "secret1"


def make_config(tmp_path, **overrides):
    attrs = {
        "TESTING": True,
        "DATABASE_URL": f"sqlite:///{tmp_path / 'wordnest.db'}",
        "JWT_SECRET": TEST_SECRET,
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        "BCRYPT_ROUNDS": 4,
        "DB_POOL_SIZE": 5,
    }
    attrs.update(overrides)
    return type("TestConfig", (Config,), attrs)


@pytest.fixture
def app(tmp_path):
    app = create_app(make_config(tmp_path))
    yield app
    app.extensions["wordnest"].engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions["wordnest"]


@pytest.fixture
def upload_dir(app):
    return app.extensions["wordnest"].assets.root


def signup(client, username, password=PASSWORD, email=None):
    return client.post("/api/auth/signup", json={
        "username": username,
        "email": email or f"{username}@example.com",
        "password": password,
    })


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Sign up a user and return auth headers for them."""
    def _register(username, password=PASSWORD):
        response = signup(client, username, password)
        assert response.status_code == 201, response.get_json()
        return auth_headers(response.get_json()["token"])
    return _register


def image_upload(name="photo.png", data=b"\x89PNG\r\n\x1a\nfake-image-bytes"):
    return (io.BytesIO(data), name)


def stored_files(directory):
    return sorted(path.name for path in directory.iterdir())
