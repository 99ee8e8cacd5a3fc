import io

import pytest

from app import create_app
from config import Config
from models import db
from models.user import User
from security.password import hash_password

PASSWORD = "secret123"

# Tiny bodies are enough: the store only looks at the declared type.
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64


class SuiteConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    BCRYPT_ROUNDS = 4
    NOTIFY_ASYNC = False
    SMTP_HOST = None
    REPORT_NOTIFY_EMAIL = None
    VENUE_EDIT_OWNER_ONLY = False
    IMAGE_DELETE_ADMIN_OVERRIDE = False


@pytest.fixture
def app(tmp_path):
    class _Config(SuiteConfig):
        UPLOAD_FOLDER = str(tmp_path / "uploads")

    app = create_app(_Config)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def users(app):
    """alice owns venues, bob is a regular user, carol is an admin."""
    rows = {
        "alice": User(username="alice", email="alice@example.com", password_hash=hash_password(PASSWORD)),
        "bob": User(username="bob", email="bob@example.com", password_hash=hash_password(PASSWORD)),
        "carol": User(
            username="carol", email="carol@example.com", password_hash=hash_password(PASSWORD), is_admin=True
        ),
    }
    db.session.add_all(rows.values())
    db.session.commit()
    return {name: user.id for name, user in rows.items()}


@pytest.fixture
def login(app, users):
    """Return a (client, headers) pair logged in as the given user."""

    def _login(username):
        c = app.test_client()
        resp = c.post("/auth/login", json={"username": username, "password": PASSWORD})
        assert resp.status_code == 200, resp.get_json()
        token = c.get_cookie("csrf_token").value
        return c, {"X-CSRF-Token": token}

    return _login


@pytest.fixture
def venue_data():
    return {
        "name": "Campo Comunale",
        "description": "Campo in erba",
        "latitude": 45.4642,
        "longitude": 9.19,
        "address": "Via Roma 1",
        "city": "Milano",
        "province": "MI",
        "region": "Lombardia",
        "sport_type": "football",
        "surface_type": "erba naturale",
        "venue_type": "11vs11",
    }


def image_upload(data=PNG_BYTES, filename="photo.png", content_type="image/png"):
    return {"image": (io.BytesIO(data), filename, content_type)}
