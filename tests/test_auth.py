from __future__ import annotations
import pytest

from app import create_app
from extensions import db
from models import User

@pytest.fixture()
def client_app():
    app = create_app("test")
    app.config.update(AUTH_RL_MAX=3, AUTH_RL_WINDOW=60)  # tight limit for the test
    with app.app_context():
        db.create_all()
    return app

@pytest.fixture()
def client(client_app):
    return client_app.test_client()

def _register(client, name="Ann", email="ann@example.com", pin="1234"):
    return client.post("/api/auth/register", json={"name": name, "email": email, "pin": pin})

def _bearer(token):
    return {"Authorization": f"Bearer {token}"}

def test_register_returns_token_and_user(client):
    r = _register(client)
    assert r.status_code == 201
    js = r.get_json()
    assert js["token"]
    assert js["user"]["name"] == "Ann"
    assert js["user"]["email"] == "ann@example.com"
    assert js["user"]["isAdmin"] is False

def test_register_duplicate_email_case_insensitive(client):
    assert _register(client, email="Ann@Example.com").status_code == 201
    r = _register(client, name="Other", email="ann@EXAMPLE.com", pin="9999")
    assert r.status_code == 400
    assert r.get_json()["error"] == "email_taken"
    assert r.get_json()["message"] == "Email already exists"

def test_register_validation(client):
    r = _register(client, pin="12ab")
    assert r.status_code == 422
    assert r.get_json()["error"] == "validation_error"
    r2 = client.post("/api/auth/register", json={"email": "x@example.com", "pin": "1234"})
    assert r2.status_code == 422

def test_pin_is_not_stored_in_clear(client_app, client):
    _register(client)
    with client_app.app_context():
        u = User.query.filter_by(email="ann@example.com").first()
        assert u.pin_hash != "1234"
        assert u.check_pin("1234")

def test_login_success_and_me(client):
    _register(client)
    r = client.post("/api/auth/login", json={"email": "ANN@example.com", "pin": "1234"})
    assert r.status_code == 200
    token = r.get_json()["token"]

    r2 = client.get("/api/auth/me", headers=_bearer(token))
    assert r2.status_code == 200
    assert r2.get_json()["user"]["email"] == "ann@example.com"

def test_login_wrong_pin(client):
    _register(client)
    r = client.post("/api/auth/login", json={"email": "ann@example.com", "pin": "0000"})
    assert r.status_code == 401
    assert r.get_json()["error"] == "invalid_credentials"

def test_login_missing_fields(client):
    r = client.post("/api/auth/login", json={"email": "ann@example.com"})
    assert r.status_code == 400

def test_rate_limit_login(client):
    for _ in range(3):  # AUTH_RL_MAX
        client.post("/api/auth/login", json={"email": "x@example.com", "pin": "0000"})
    r = client.post("/api/auth/login", json={"email": "x@example.com", "pin": "0000"})
    assert r.status_code == 429

def test_invalid_token_401(client):
    r = client.get("/api/auth/me", headers=_bearer("not-a-token"))
    assert r.status_code == 401
    assert r.get_json()["error"] == "unauthorized"

def test_admin_flag_from_allow_list(client):
    r = _register(client, name="Boss", email="Admin@example.com", pin="0000")
    assert r.get_json()["user"]["isAdmin"] is True

def test_profile_update_keeps_pin_when_blank(client):
    token = _register(client).get_json()["token"]
    r = client.put("/api/auth/profile", headers=_bearer(token),
                   json={"name": "Ann B.", "email": "ann.b@example.com", "pin": ""})
    assert r.status_code == 200
    js = r.get_json()
    assert js["user"]["name"] == "Ann B."
    assert js["user"]["email"] == "ann.b@example.com"

    r2 = client.post("/api/auth/login", json={"email": "ann.b@example.com", "pin": "1234"})
    assert r2.status_code == 200

def test_profile_update_changes_pin(client):
    token = _register(client).get_json()["token"]
    r = client.put("/api/auth/profile", headers=_bearer(token),
                   json={"name": "Ann", "email": "ann@example.com", "pin": "4321"})
    assert r.status_code == 200
    assert client.post("/api/auth/login", json={"email": "ann@example.com", "pin": "4321"}).status_code == 200

def test_profile_email_taken(client):
    _register(client, name="Bob", email="bob@example.com")
    token = _register(client).get_json()["token"]
    r = client.put("/api/auth/profile", headers=_bearer(token),
                   json={"name": "Ann", "email": "BOB@example.com"})
    assert r.status_code == 400
    assert r.get_json()["error"] == "email_taken"

def test_profile_requires_login(client):
    r = client.put("/api/auth/profile", json={"name": "x", "email": "x@example.com"})
    assert r.status_code == 401

def test_duplicate_email_race_is_400_not_500(client, monkeypatch):
    from blueprints.auth import services as auth_svc
    assert _register(client).status_code == 201
    # the pre-check misses the row, the unique index still catches it
    monkeypatch.setattr(auth_svc, "_email_taken", lambda email, exclude_id=None: False)
    r = _register(client, name="Twin", email="ANN@example.com", pin="9999")
    assert r.status_code == 400
    assert r.get_json()["error"] == "email_taken"

def test_profile_email_race_is_400(client, monkeypatch):
    from blueprints.auth import services as auth_svc
    _register(client, name="Bob", email="bob@example.com")
    token = _register(client).get_json()["token"]
    monkeypatch.setattr(auth_svc, "_email_taken", lambda email, exclude_id=None: False)
    r = client.put("/api/auth/profile", headers=_bearer(token),
                   json={"name": "Ann", "email": "bob@example.com"})
    assert r.status_code == 400
    assert r.get_json()["error"] == "email_taken"
    monkeypatch.undo()
    # the failed update left Ann's account untouched
    assert client.get("/api/auth/me", headers=_bearer(token)).get_json()["user"]["email"] == "ann@example.com"
