# portal/schemas/secretaries.py
from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel


class SecretaryLogin(BaseModel):
    name: str = ""
    phone: str = ""
    church_id: Optional[Union[int, str]] = None


class ReturningSecretary(BaseModel):
    name: str
    church: str
    church_id: int


class OrganizerLogin(BaseModel):
    passkey: str = ""
