# portal/models/church.py
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from portal.db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Church(Base):
    # Table name is capitalised in the hosted schema.
    __tablename__ = "Church"

    id = Column(Integer, primary_key=True, index=True)
    church_name = Column(String(200), nullable=False)
    church_place = Column(String(200), nullable=False, server_default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    secretaries = relationship("Profile", back_populates="church_ref")

    @property
    def label(self) -> str:
        return f"{self.church_name} - {self.church_place}" if self.church_place else self.church_name
