from datetime import date

import pytest

from danceup import create_app, db
from danceup.auth import AuthService
from danceup.blobs import BlobStore
from danceup.store import DocumentStore

# A Wednesday; class horizons in the tests are anchored here.
TODAY = date(2025, 7, 9)

PROFILE = {
    "first_name": "Ana",
    "last_name": "Ruiz",
    "address1": "12 Main St",
    "city": "Austin",
    "state": "TX",
    "zip_code": "78701",
    "studio_name": "Step Up Studio",
}


@pytest.fixture
def app(tmp_path):
    app = create_app(
        {
            "DATABASE_URL": "sqlite://",
            "BLOB_ROOT": str(tmp_path / "blobs"),
            "SECRET_KEY": "test-secret",
            "LOG_LEVEL": "WARNING",
        },
        today=lambda: TODAY,
    )
    app.config["TESTING"] = True
    yield app
    app.extensions["danceup"].feeds.close_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions["danceup"]


@pytest.fixture
def store():
    db.configure("sqlite://")
    db.init_db()
    return DocumentStore()


@pytest.fixture
def blobs(tmp_path):
    return BlobStore(str(tmp_path / "blobs"), "/blobs")


@pytest.fixture
def auth(store, blobs):
    return AuthService(store, blobs, secret_key="test-secret", max_age=3600)


@pytest.fixture
def owner(auth):
    return auth.sign_up("ana@example.com", "secret1", "secret1", dict(PROFILE))


@pytest.fixture
def other_owner(auth):
    return auth.sign_up("ben@example.com", "secret2", "secret2", dict(PROFILE, first_name="Ben"))


def signup(client, email="ana@example.com", password="secret1", **extra):
    payload = dict(PROFILE, email=email, password=password, confirm_password=password, **extra)
    resp = client.post("/auth/signup", json=payload)
    assert resp.status_code == 201, resp.get_json()
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}


@pytest.fixture
def headers(client):
    return signup(client)
