# portal/schemas/members.py
from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict

MEMBER_CHURCHES = (
    "Grace Community Church - Main Campus",
    "Grace Community Church - North Campus",
    "Grace Community Church - South Campus",
    "Grace Community Church - East Campus",
    "Grace Community Church - West Campus",
    "Other Church",
)


class MemberRegister(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    date_of_birth: Optional[date] = Field(default=None, alias="dateOfBirth")
    church: str = ""
    password: str = ""
    confirm_password: str = Field(default="", alias="confirmPassword")

    model_config = ConfigDict(populate_by_name=True)


class MemberLogin(BaseModel):
    email: str = ""
    password: str = ""


class MemberOut(BaseModel):
    id: UUID
    email: Optional[str] = None
    role: str
    name: Optional[str] = None
    church: Optional[str] = None


class MemberSession(BaseModel):
    access_token: Optional[str] = None
    user_id: Optional[str] = None
    redirect: str = "/dashboard"
