# portal/services/sessions.py
"""
Login markers for the secretary and organizer areas.

A session is opened at login and handed to the client as an opaque token;
only the sha256 hash of the token is stored. Resolving a token walks
``checking -> authorized | redirect-to-login``: a missing, unknown, expired
or malformed marker is treated as "not logged in", and a stored marker that
fails validation is deleted on the way out.
"""
from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.orm import Session

from portal import config
from portal.errors import LoginRequired
from portal.models.session import PortalSession, SessionKind
from portal.schemas.sessions import PortalSessionData

logger = logging.getLogger(__name__)

LOGIN_ROUTES = {
    SessionKind.secretary: "/secretary-login",
    SessionKind.organizer: "/organizer-login",
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _aware(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def hash_token(token: str) -> str:
    h = hashlib.sha256()
    h.update((token + config.session_token_pepper()).encode("utf-8"))
    return h.hexdigest()


def _payload_is_valid(kind: SessionKind, payload: Any) -> bool:
    if not isinstance(payload, dict):
        return False
    if kind == SessionKind.secretary:
        return bool(payload.get("id")) and bool(payload.get("name"))
    return payload.get("authorized") is True and payload.get("role") == "organizer"


def _to_data(row: PortalSession) -> PortalSessionData:
    return PortalSessionData(
        kind=row.kind,
        profile_id=row.profile_id,
        payload=dict(row.payload or {}),
        created_at=row.created_at,
        expires_at=_aware(row.expires_at),
    )


def open_session(
    db: Session,
    kind: SessionKind,
    payload: Dict[str, Any],
    profile_id: Optional[UUID] = None,
) -> tuple[str, PortalSessionData]:
    token = secrets.token_urlsafe(32)
    now = _now()
    row = PortalSession(
        token_hash=hash_token(token),
        kind=kind.value,
        profile_id=profile_id,
        payload=payload,
        created_at=now,
        expires_at=now + timedelta(hours=config.session_ttl_hours()),
    )
    db.add(row)
    db.commit()
    logger.info("opened %s session profile_id=%s", kind.value, profile_id)
    return token, _to_data(row)


def close_session(db: Session, token: Optional[str]) -> bool:
    if not token:
        return False
    res = db.execute(delete(PortalSession).where(PortalSession.token_hash == hash_token(token)))
    db.commit()
    return bool(res.rowcount)


def resolve_session(db: Session, token: Optional[str], kind: SessionKind) -> PortalSessionData:
    login_route = LOGIN_ROUTES[kind]
    if not token or not token.strip():
        raise LoginRequired(login_route, "Login required")

    row = db.get(PortalSession, hash_token(token.strip()))
    if row is None:
        raise LoginRequired(login_route, "Session not found")

    if row.kind != kind.value:
        raise LoginRequired(login_route, "Session does not grant this area")

    if _aware(row.expires_at) <= _now():
        db.delete(row)
        db.commit()
        raise LoginRequired(login_route, "Session expired")

    if not _payload_is_valid(kind, row.payload):
        logger.warning("dropping malformed %s session marker", kind.value)
        db.delete(row)
        db.commit()
        raise LoginRequired(login_route, "Invalid session")

    return _to_data(row)


def purge_expired(db: Session) -> int:
    res = db.execute(delete(PortalSession).where(PortalSession.expires_at <= _now()))
    db.commit()
    return res.rowcount or 0
