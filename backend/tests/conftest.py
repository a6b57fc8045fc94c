# tests/conftest.py
from __future__ import annotations

import uuid
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import portal.models  # noqa: F401
from portal.db import Base, get_db
from portal.main import app
from portal.models.church import Church
from portal.services.member_auth import AuthFailed, AuthResult, AuthUser, get_member_auth

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeMemberAuth:
    """In-memory stand-in for the hosted auth API."""

    def __init__(self):
        self.accounts: Dict[str, tuple] = {}
        self.tokens: Dict[str, AuthUser] = {}
        self.next_user_id: Optional[str] = None

    def sign_up(self, email: str, password: str, metadata: dict) -> AuthResult:
        if email in self.accounts:
            raise AuthFailed("User already registered")
        user = AuthUser(id=self.next_user_id or str(uuid.uuid4()), email=email, metadata=metadata)
        self.accounts[email] = (password, user)
        return AuthResult(user=user, access_token=self._issue(user))

    def sign_in(self, email: str, password: str) -> AuthResult:
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise AuthFailed("Invalid login credentials")
        return AuthResult(user=account[1], access_token=self._issue(account[1]))

    def get_user(self, access_token: str) -> Optional[AuthUser]:
        return self.tokens.get(access_token)

    def _issue(self, user: AuthUser) -> str:
        token = f"tok-{uuid.uuid4().hex}"
        self.tokens[token] = user
        return token


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def fake_auth():
    return FakeMemberAuth()


@pytest.fixture()
def client(db, fake_auth, monkeypatch):
    monkeypatch.delenv("ORGANIZER_PASSKEY", raising=False)

    def _get_db():
        s = TestingSessionLocal()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_member_auth] = lambda: fake_auth
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def churches(db):
    rows = [
        Church(church_name="Grace Church", church_place="Kochi"),
        Church(church_name="Bethel AG", church_place="Thrissur"),
        Church(church_name="Zion Fellowship", church_place="Kottayam"),
    ]
    db.add_all(rows)
    db.commit()
    return [c.id for c in rows]


def secretary_login(client, church_id, phone="9876543210", name="Samuel"):
    r = client.post("/secretary/login", json={"name": name, "phone": phone, "church_id": church_id})
    assert r.status_code == 200, r.text
    return r.json()


def organizer_login(client, passkey="CHURCH2025ADMIN"):
    r = client.post("/organizer/login", json={"passkey": passkey})
    assert r.status_code == 200, r.text
    return r.json()["token"]
