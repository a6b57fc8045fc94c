# portal/schemas/sessions.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel


class PortalSessionData(BaseModel):
    """The typed session a gate hands to a view; created at login, dropped at logout/expiry."""
    kind: str
    profile_id: Optional[UUID] = None
    payload: Dict[str, Any] = {}
    created_at: Optional[datetime] = None
    expires_at: datetime


class SessionOut(BaseModel):
    token: str
    kind: str
    expires_at: datetime
    redirect: str
    data: Dict[str, Any] = {}
