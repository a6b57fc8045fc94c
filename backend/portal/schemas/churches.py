# portal/schemas/churches.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ChurchRead(BaseModel):
    id: int
    church_name: str
    church_place: str = ""
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
