import uuid
from datetime import timedelta

import pytest

from app.auth.tokens import AuthError, hash_magic_token, issue_access_token, now_utc, verify_access_token
from app.models.auth_magic_link import AuthMagicLink
from app.models.user import User

def _request_magic_token(client, email: str = "magiclink@example.com", **extra) -> str:
    r = client.post("/auth/request-link", json={"email": email, **extra})
    assert r.status_code == 200, r.text
    token = r.json().get("token")
    assert token, "expected token to be returned in non-prod env"
    return token

def test_magic_link_cannot_be_reused(client):
    token = _request_magic_token(client)

    r1 = client.post("/auth/redeem", json={"token": token})
    assert r1.status_code == 200, r1.text
    assert "access_token" in r1.json()

    r2 = client.post("/auth/redeem", json={"token": token})
    assert r2.status_code == 400, r2.text
    assert r2.json()["detail"] == "token already used"

def test_magic_link_expires(client, db_session):
    token = _request_magic_token(client)

    row = db_session.get(AuthMagicLink, hash_magic_token(token))
    assert row is not None
    row.expires_at = now_utc() - timedelta(seconds=1)
    db_session.add(row)
    db_session.commit()

    r = client.post("/auth/redeem", json={"token": token})
    assert r.status_code == 400, r.text
    assert r.json()["detail"] == "token expired"

def test_unknown_token_is_rejected(client):
    r = client.post("/auth/redeem", json={"token": "never-issued"})
    assert r.status_code == 400
    assert r.json()["detail"] == "invalid token"

def test_first_request_registers_the_user(client, db_session):
    _request_magic_token(client, email="New.Person@Example.com", name="New Person")

    user = db_session.query(User).filter_by(email="new.person@example.com").one()
    assert user.name == "New Person"

def test_redeemed_token_authenticates(client):
    token = _request_magic_token(client, email="me@example.com")
    jwt = client.post("/auth/redeem", json={"token": token}).json()["access_token"]

    r = client.get("/projects", headers={"authorization": f"bearer {jwt}"})
    assert r.status_code == 200
    assert r.json() == []

def test_access_token_round_trip():
    user_id = uuid.uuid4()
    assert verify_access_token(issue_access_token(user_id)) == user_id

def test_garbage_token_is_an_auth_error():
    with pytest.raises(AuthError):
        verify_access_token("nope")
