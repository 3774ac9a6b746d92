from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import false, func, select

from tests.conftest import PASSWORD, auth_headers, signup
from wordnest.database import db_session
from wordnest.models import User
from wordnest.services import auth_service


def count_users(services):
    with db_session(services.sessions) as session:
        return session.execute(select(func.count(User.id))).scalar_one()


def test_signup_returns_token_and_public_user(client):
    response = signup(client, "alice")

    assert response.status_code == 201
    body = response.get_json()
    assert body["token"]
    assert body["user"]["username"] == "alice"
    assert body["user"]["email"] == "alice@example.com"
    assert body["user"]["bio"] is None
    assert "password" not in body["user"]


def test_signup_then_login_gives_a_working_token(client):
    signup(client, "alice")

    response = client.post("/api/auth/login", json={"email": "alice@example.com", "password": PASSWORD})

    assert response.status_code == 200
    token = response.get_json()["token"]
    profile = client.get("/api/user/profile", headers=auth_headers(token))
    assert profile.status_code == 200
    assert profile.get_json()["username"] == "alice"


def test_signup_accepts_form_encoded_body(client):
    response = client.post("/api/auth/signup", data={
        "username": "alice", "email": "alice@example.com", "password": PASSWORD,
    })
    assert response.status_code == 201


@pytest.mark.parametrize("payload", [
    {"email": "a@example.com", "password": PASSWORD},
    {"username": "alice", "password": PASSWORD},
    {"username": "alice", "email": "a@example.com"},
    {"username": "alice", "email": "a@example.com", "password": ""},
])
def test_signup_requires_all_fields(client, payload):
    response = client.post("/api/auth/signup", json=payload)
    assert response.status_code == 400
    assert response.get_json()["error"] == "Username, email, and password are required"


def test_signup_rejects_short_password(client):
    response = signup(client, "alice", password="12345")
    assert response.status_code == 400


def test_signup_rejects_malformed_email(client):
    response = signup(client, "alice", email="not-an-email")
    assert response.status_code == 400


def test_duplicate_username_conflicts_without_creating_a_row(client, services):
    signup(client, "alice")

    response = signup(client, "alice", email="other@example.com")

    assert response.status_code == 409
    assert count_users(services) == 1


def test_duplicate_email_conflicts_without_creating_a_row(client, services):
    signup(client, "alice")

    response = signup(client, "bob", email="alice@example.com")

    assert response.status_code == 409
    assert count_users(services) == 1


def test_unique_constraint_catches_duplicate_missed_by_precheck(client, services, monkeypatch):
    signup(client, "alice")
    monkeypatch.setattr(auth_service, "or_", lambda *clauses: false())

    response = signup(client, "alice", email="other@example.com")

    assert response.status_code == 409
    assert response.get_json()["error"] == "Username or email already exists"
    assert count_users(services) == 1


def test_login_with_wrong_password_or_unknown_email(client):
    signup(client, "alice")

    wrong_password = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "nope123"})
    unknown = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": PASSWORD})

    assert wrong_password.status_code == 401
    assert unknown.status_code == 401
    assert wrong_password.get_json() == unknown.get_json() == {"error": "Invalid email or password"}


def test_login_requires_email_and_password(client):
    response = client.post("/api/auth/login", json={"email": "alice@example.com"})
    assert response.status_code == 400


def test_invalid_json_body_is_rejected(client):
    response = client.post("/api/auth/login", data="{not json", content_type="application/json")
    assert response.status_code == 400


def test_non_object_json_body_is_rejected(client):
    response = client.post("/api/auth/login", json=["alice@example.com", PASSWORD])
    assert response.status_code == 400


def test_non_string_field_is_rejected(client):
    response = client.post("/api/auth/signup", json={"username": 5, "email": "a@example.com", "password": PASSWORD})
    assert response.status_code == 400


def test_protected_route_without_token(client):
    response = client.get("/api/posts")
    assert response.status_code == 401
    assert response.get_json()["error"] == "Access token required"


def test_protected_route_with_invalid_token(client):
    response = client.get("/api/posts", headers=auth_headers("garbage"))
    assert response.status_code == 401
    assert response.get_json()["error"] == "Invalid token"


def test_protected_route_with_expired_token(client, services):
    token = services.tokens.issue(1, "alice", now=datetime.now(timezone.utc) - timedelta(days=8))

    response = client.get("/api/posts", headers=auth_headers(token))

    assert response.status_code == 401
    assert response.get_json()["error"] == "Token has expired"


def test_protected_route_with_wrong_scheme(client):
    response = client.get("/api/posts", headers={"Authorization": "Basic dXNlcjpwYXNz"})
    assert response.status_code == 401


def test_unauthenticated_request_never_reaches_the_handler(client, services, monkeypatch):
    calls = []
    monkeypatch.setattr(services.posts, "list", lambda *args: calls.append(args))

    client.get("/api/posts")

    assert calls == []
