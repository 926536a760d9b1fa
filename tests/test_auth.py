import smtplib

from app.extensions import db, mail
from app.models import User


def _register(client, email="ann@example.com", password="secret-pw"):
    return client.post("/api/register", json={"name": "Ann", "email": email, "password": password})


def test_register_creates_unverified_user_and_sends_link(app, client):
    with mail.record_messages() as outbox:
        r = _register(client)

    assert r.status_code == 201
    assert r.get_json()["success"] is True

    with app.app_context():
        user = User.query.filter_by(email="ann@example.com").one()
        assert user.status == "unverified"
        assert user.verification_token
        assert user.password_hash != "secret-pw"
        token = user.verification_token

    assert len(outbox) == 1
    assert outbox[0].recipients == ["ann@example.com"]
    assert f"verify-email?token={token}" in outbox[0].body


def test_register_missing_fields(client):
    r = client.post("/api/register", json={"email": "x@example.com"})
    assert r.status_code == 400


def test_duplicate_email_is_rejected(app, client):
    assert _register(client).status_code == 201
    r = _register(client, email="ANN@example.com ")
    assert r.status_code == 409

    with app.app_context():
        assert User.query.filter_by(email="ann@example.com").count() == 1


def test_register_succeeds_when_mail_fails(app, client, monkeypatch):
    def boom(**kwargs):
        raise smtplib.SMTPException("smtp down")

    monkeypatch.setattr("app.routes.auth.send_email", boom)
    r = _register(client)

    assert r.status_code == 201
    assert r.get_json()["email_sent"] is False
    with app.app_context():
        assert User.query.filter_by(email="ann@example.com").count() == 1


def test_verify_token_only_once(app, client):
    _register(client)
    with app.app_context():
        token = User.query.filter_by(email="ann@example.com").one().verification_token

    first = client.get(f"/api/verify-email?token={token}")
    assert first.status_code == 200
    with app.app_context():
        user = User.query.filter_by(email="ann@example.com").one()
        assert user.status == "verified"
        assert user.verification_token is None

    second = client.get(f"/api/verify-email?token={token}")
    assert second.status_code == 400
    assert second.get_json()["error"] == "Invalid or expired token"


def test_verify_with_unknown_or_missing_token(client):
    assert client.get("/api/verify-email?token=nope").status_code == 400
    assert client.get("/api/verify-email").status_code == 400


def test_login_flow(app, client):
    _register(client)

    bad = client.post("/api/login", json={"email": "ann@example.com", "password": "wrong"})
    assert bad.status_code == 401
    assert bad.get_json()["error"] == "Invalid credentials"

    unknown = client.post("/api/login", json={"email": "who@example.com", "password": "secret-pw"})
    assert unknown.status_code == 401

    unverified = client.post("/api/login", json={"email": "ann@example.com", "password": "secret-pw"})
    assert unverified.status_code == 403

    with app.app_context():
        token = User.query.filter_by(email="ann@example.com").one().verification_token
    client.get(f"/api/verify-email?token={token}")

    ok = client.post("/api/login", json={"email": "ann@example.com", "password": "secret-pw"})
    assert ok.status_code == 200
    body = ok.get_json()
    assert body["access_token"]
    assert body["user"]["email"] == "ann@example.com"
    assert body["user"]["role"] == "student"
    assert set(body["user"]) == {"id", "name", "email", "role"}

    me = client.get("/api/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.get_json()["id"] == body["user"]["id"]


def test_unverified_admin_may_log_in(app, client):
    _register(client)
    with app.app_context():
        user = User.query.filter_by(email="ann@example.com").one()
        user.role = "admin"
        db.session.commit()

    r = client.post("/api/login", json={"email": "ann@example.com", "password": "secret-pw"})
    assert r.status_code == 200


def test_resend_verification_rotates_token(app, client):
    _register(client)
    with app.app_context():
        old = User.query.filter_by(email="ann@example.com").one().verification_token

    r = client.post("/api/resend-verification", json={"email": "ann@example.com"})
    assert r.status_code == 200

    with app.app_context():
        new = User.query.filter_by(email="ann@example.com").one().verification_token
    assert new != old
    assert client.get(f"/api/verify-email?token={old}").status_code == 400
    assert client.get(f"/api/verify-email?token={new}").status_code == 200

    again = client.post("/api/resend-verification", json={"email": "ann@example.com"})
    assert again.status_code == 400
    assert client.post("/api/resend-verification", json={"email": "x@example.com"}).status_code == 404


def test_non_object_body_is_rejected(client):
    assert client.post("/api/register", json=["ann@example.com"]).status_code == 400
    assert client.post("/api/resend-verification", json=["ann@example.com"]).status_code == 400
    assert client.post("/api/login", json=[1]).status_code == 400
