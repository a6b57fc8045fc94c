# portal/models/profile.py
from __future__ import annotations

import enum
import uuid

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Uuid, func
from sqlalchemy.orm import relationship

from portal.db import Base
from portal.models.church import _utcnow


class ProfileRole(str, enum.Enum):
    secretary = "secretary"
    organizer = "organizer"
    member = "member"


class Profile(Base):
    """
    One row per person known to the portal.

    Secretaries are keyed by phone and tied to a church; members come from
    hosted-auth sign-up and reuse the auth user id as their primary key.
    "One secretary per church" is checked by the login service only; there is
    no unique index on church_id.
    """
    __tablename__ = "profiles"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    phone = Column(String(32), nullable=True, index=True)
    church_id = Column(Integer, ForeignKey("Church.id", ondelete="SET NULL"), nullable=True, index=True)
    role = Column(String(20), nullable=False, default=ProfileRole.secretary.value, server_default="secretary")

    # Member-account fields
    email = Column(String(255), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    church = Column(String(200), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    church_ref = relationship("Church", back_populates="secretaries", lazy="joined")
    participants = relationship("Participant", back_populates="secretary")

    @property
    def church_name(self) -> str | None:
        if self.church_ref is not None:
            return self.church_ref.church_name
        return self.church
