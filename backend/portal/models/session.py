# portal/models/session.py
from __future__ import annotations

import enum

from sqlalchemy import JSON, Column, DateTime, String, Uuid, func

from portal.db import Base
from portal.models.church import _utcnow


class SessionKind(str, enum.Enum):
    secretary = "secretary"
    organizer = "organizer"


class PortalSession(Base):
    """Server-side login marker; the client only ever holds the raw token."""
    __tablename__ = "portal_sessions"

    token_hash = Column(String(64), primary_key=True)
    kind = Column(String(20), nullable=False, index=True)
    profile_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    payload = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
    expires_at = Column(DateTime(timezone=True), nullable=False)
