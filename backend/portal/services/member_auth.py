# portal/services/member_auth.py
"""
Member accounts, delegated to the hosted auth service (Supabase Auth).

Passwords and tokens never touch the portal database: sign-up, sign-in and
token verification are calls to the hosted API. The portal keeps only a
`profiles` row per member for name/church/role.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import Any, Dict, Optional
from uuid import UUID

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from supabase import AuthError, Client, create_client

from portal.errors import ErrorKind, PortalError, ValidationFailed
from portal.models.profile import Profile, ProfileRole
from portal.schemas.members import MEMBER_CHURCHES, MemberLogin, MemberRegister

logger = logging.getLogger(__name__)


@dataclass
class AuthUser:
    id: str
    email: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


@dataclass
class AuthResult:
    user: Optional[AuthUser]
    access_token: Optional[str] = None


class AuthFailed(Exception):
    pass


def _unreachable(exc: httpx.HTTPError) -> PortalError:
    logger.error("hosted auth unreachable: %s", type(exc).__name__)
    return PortalError(ErrorKind.transient, "Authentication service unavailable")


def get_supabase_client() -> Client:
    """Return a Supabase client if credentials are set."""
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_ANON_KEY")
    if not url or not key:
        raise RuntimeError("Supabase credentials not set in environment variables.")
    return create_client(url, key)


def _user(u: Any) -> Optional[AuthUser]:
    if u is None:
        return None
    return AuthUser(id=str(u.id), email=getattr(u, "email", None), metadata=getattr(u, "user_metadata", None))


class MemberAuth:
    """Thin adapter over the hosted auth API; raises AuthFailed with the provider's message.

    A transport failure (the API unreachable) is a transient PortalError instead.
    """

    def __init__(self, client: Client):
        self.client = client

    def sign_up(self, email: str, password: str, metadata: Dict[str, Any]) -> AuthResult:
        try:
            res = self.client.auth.sign_up({"email": email, "password": password, "options": {"data": metadata}})
        except AuthError as e:
            raise AuthFailed(e.message or "Failed to create account") from e
        except httpx.HTTPError as e:
            raise _unreachable(e) from e
        token = res.session.access_token if res.session else None
        return AuthResult(user=_user(res.user), access_token=token)

    def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            res = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except AuthError as e:
            raise AuthFailed(e.message or "Invalid login credentials") from e
        except httpx.HTTPError as e:
            raise _unreachable(e) from e
        token = res.session.access_token if res.session else None
        return AuthResult(user=_user(res.user), access_token=token)

    def get_user(self, access_token: str) -> Optional[AuthUser]:
        try:
            res = self.client.auth.get_user(access_token)
        except AuthError:
            return None
        except httpx.HTTPError as e:
            raise _unreachable(e) from e
        return _user(res.user) if res else None


@lru_cache(maxsize=1)
def get_member_auth() -> MemberAuth:
    return MemberAuth(get_supabase_client())


# ─────────────────────────────────────────────────────────────────────────────
# Register / login
# ─────────────────────────────────────────────────────────────────────────────

def validate_registration(form: MemberRegister, today: Optional[date] = None) -> Dict[str, str]:
    today = today or date.today()
    errors: Dict[str, str] = {}
    if not form.name.strip():
        errors["name"] = "Please enter your full name"
    if "@" not in form.email:
        errors["email"] = "Please enter a valid email address"
    if not form.phone.strip():
        errors["phone"] = "Please enter your phone number"
    if form.date_of_birth is None:
        errors["date_of_birth"] = "Please enter your date of birth"
    elif form.date_of_birth > today:
        errors["date_of_birth"] = "Date of birth cannot be in the future"
    if form.church not in MEMBER_CHURCHES:
        errors["church"] = "Please select your church"
    if len(form.password) < 6:
        errors["password"] = "Password must be at least 6 characters"
    elif form.password != form.confirm_password:
        errors["confirm_password"] = "Passwords do not match"
    return errors


def register_member(db: Session, auth: MemberAuth, form: MemberRegister) -> AuthResult:
    errors = validate_registration(form)
    if errors:
        raise ValidationFailed(errors)

    name = form.name.strip()
    metadata = {
        "name": name,
        "phone": form.phone.strip(),
        "date_of_birth": form.date_of_birth.isoformat(),
        "church": form.church,
    }
    try:
        result = auth.sign_up(form.email.strip(), form.password, metadata)
    except AuthFailed as e:
        raise PortalError(ErrorKind.validation, str(e))

    logger.info("member signed up user_id=%s", result.user.id if result.user else None)

    if result.user is not None:
        try:
            db.add(Profile(
                id=UUID(result.user.id),
                name=name,
                email=form.email.strip(),
                phone=form.phone.strip(),
                date_of_birth=form.date_of_birth,
                church=form.church,
                role=ProfileRole.member.value,
            ))
            db.commit()
        except (SQLAlchemyError, ValueError):
            # The auth account exists either way; the sign-up still succeeds.
            db.rollback()
            logger.exception("profile creation failed for member user_id=%s", result.user.id)
    return result


def login_member(auth: MemberAuth, form: MemberLogin) -> AuthResult:
    errors: Dict[str, str] = {}
    if "@" not in form.email:
        errors["email"] = "Please enter a valid email address"
    if len(form.password) < 6:
        errors["password"] = "Password must be at least 6 characters"
    if errors:
        raise ValidationFailed(errors)

    return auth.sign_in(form.email.strip(), form.password)
