# portal/schemas/participants.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

ROLES = ("student", "teacher")
SECTIONS = ("nursery", "beginner", "primary", "junior", "senior")
COMPETITIONS = (
    "memory verse",
    "speech competition",
    "singing competition",
    "quiz",
    "musical instrumental",
)


class ParticipantCreate(BaseModel):
    name: str
    role: str = "student"
    section: Optional[str] = None
    competitions: List[str] = Field(default_factory=list)


class ParticipantUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    section: Optional[str] = None
    competitions: Optional[List[str]] = None


class ParticipantRead(BaseModel):
    id: int
    participant_id: str
    name: str
    role: str
    section: Optional[str] = None
    competitions: List[str] = []
    secretary_id: UUID
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
