# tests/test_access_gate.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from portal.models.session import PortalSession, SessionKind
from portal.services import sessions

from conftest import organizer_login, secretary_login


def test_missing_token_redirects_to_login(client):
    r = client.get("/secretary/participants")
    assert r.status_code == 401
    assert r.json()["redirect"] == "/secretary-login"

    r = client.get("/organizer/participants")
    assert r.status_code == 401
    assert r.json()["redirect"] == "/organizer-login"


def test_unknown_token_redirects(client):
    r = client.get("/secretary/me", headers={"X-Session-Token": "not-a-real-token"})
    assert r.status_code == 401
    assert r.json()["redirect"] == "/secretary-login"


def test_valid_secretary_session_is_authorized(client, churches):
    login = secretary_login(client, churches[0])
    assert login["redirect"] == "/secretary/dashboard"
    r = client.get("/secretary/me", headers={"X-Session-Token": login["token"]})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["kind"] == "secretary"
    assert body["payload"]["name"] == "Samuel"
    assert body["payload"]["church"] == "Grace Church"


def test_secretary_token_does_not_open_organizer_area(client, churches):
    token = secretary_login(client, churches[0])["token"]
    r = client.get("/organizer/participants", headers={"X-Session-Token": token})
    assert r.status_code == 401
    assert r.json()["redirect"] == "/organizer-login"


def test_malformed_marker_is_cleared(client, db):
    token, _ = sessions.open_session(db, SessionKind.secretary, {"name": "No Id"})
    r = client.get("/secretary/me", headers={"X-Session-Token": token})
    assert r.status_code == 401
    db.expire_all()
    assert db.get(PortalSession, sessions.hash_token(token)) is None


def test_expired_marker_is_cleared(client, db):
    token, _ = sessions.open_session(db, SessionKind.organizer, {"role": "organizer", "authorized": True})
    row = db.get(PortalSession, sessions.hash_token(token))
    row.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
    db.commit()

    r = client.get("/organizer/participants", headers={"X-Session-Token": token})
    assert r.status_code == 401
    assert r.json()["detail"] == "Session expired"
    db.expire_all()
    assert db.get(PortalSession, sessions.hash_token(token)) is None


def test_logout_clears_session(client):
    token = organizer_login(client)
    h = {"X-Session-Token": token}
    assert client.get("/organizer/participants", headers=h).status_code == 200
    assert client.post("/organizer/logout", headers=h).status_code == 204
    assert client.get("/organizer/participants", headers=h).status_code == 401


def test_login_revokes_presented_session(client, churches):
    sec_token = secretary_login(client, churches[0])["token"]
    r = client.post("/organizer/login", json={"passkey": "CHURCH2025ADMIN"}, headers={"X-Session-Token": sec_token})
    assert r.status_code == 200
    assert client.get("/secretary/me", headers={"X-Session-Token": sec_token}).status_code == 401


def test_only_token_hash_is_stored(db):
    token, _ = sessions.open_session(db, SessionKind.organizer, {"role": "organizer", "authorized": True})
    stored = db.query(PortalSession).all()
    assert len(stored) == 1
    assert stored[0].token_hash != token
    assert stored[0].token_hash == sessions.hash_token(token)
