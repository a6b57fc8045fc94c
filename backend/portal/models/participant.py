# portal/models/participant.py
from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Uuid, func
from sqlalchemy.orm import relationship

from portal.db import Base
from portal.models.church import _utcnow


class Participant(Base):
    __tablename__ = "participants"

    id = Column(Integer, primary_key=True, index=True)
    # Short code such as "N003"; unique by allocation only, never by constraint.
    participant_id = Column(String(8), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False)
    section = Column(String(20), nullable=True)
    competitions = Column(JSON, nullable=False, default=list)
    secretary_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    secretary = relationship("Profile", back_populates="participants", lazy="joined")
