import os

import pytest

from app import create_app
from app.config import TestConfig
from app.extensions import db
from app.models import User


@pytest.fixture
def app(tmp_path):
    class _Config(TestConfig):
        UPLOAD_FOLDER = str(tmp_path / "uploads")

    app = create_app(_Config)
    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers(app, client):
    r = client.post("/api/login", json={
        "email": app.config["ROOT_ADMIN_EMAIL"],
        "password": app.config["ROOT_ADMIN_PASSWORD"],
    })
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.get_json()['access_token']}"}


@pytest.fixture
def make_student(app, client):
    """Register, verify and log in a student; returns (user_id, auth headers)."""
    def _make(email="student@example.com", name="Student", password="pw-123456"):
        r = client.post("/api/register", json={"name": name, "email": email, "password": password})
        assert r.status_code == 201
        with app.app_context():
            token = User.query.filter_by(email=email).first().verification_token
        assert client.get(f"/api/verify-email?token={token}").status_code == 200

        r = client.post("/api/login", json={"email": email, "password": password})
        assert r.status_code == 200
        body = r.get_json()
        return body["user"]["id"], {"Authorization": f"Bearer {body['access_token']}"}
    return _make


@pytest.fixture
def stored_files(app):
    """Names currently present in the upload folder."""
    def _list():
        folder = app.config["UPLOAD_FOLDER"]
        return sorted(os.listdir(folder)) if os.path.isdir(folder) else []
    return _list
