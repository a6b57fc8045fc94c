"""
Shared FastAPI dependencies: the DB session and the route access gates.

Secretary and organizer areas are gated by a portal session token sent in
`X-Session-Token`. Member routes are gated by a hosted-auth access token
(`Authorization: Bearer ...`) that is verified against the hosted API on
every request.
"""
from __future__ import annotations

from typing import Callable, Optional
from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from portal.db import get_db  # noqa: F401  re-exported for routers
from portal.errors import LoginRequired
from portal.models.profile import Profile
from portal.models.session import SessionKind
from portal.schemas.members import MemberOut
from portal.schemas.sessions import PortalSessionData
from portal.services import sessions
from portal.services.member_auth import MemberAuth, get_member_auth

MEMBER_LOGIN_ROUTE = "/login"


def session_token(x_session_token: Optional[str] = Header(default=None, alias="X-Session-Token")) -> Optional[str]:
    return x_session_token


def require_secretary_session(
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(session_token),
) -> PortalSessionData:
    return sessions.resolve_session(db, token, SessionKind.secretary)


def require_organizer_session(
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(session_token),
) -> PortalSessionData:
    return sessions.resolve_session(db, token, SessionKind.organizer)


def current_secretary_id(session: PortalSessionData = Depends(require_secretary_session)) -> UUID:
    return session.profile_id or UUID(str(session.payload["id"]))


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_member(
    db: Session = Depends(get_db),
    auth: MemberAuth = Depends(get_member_auth),
    authorization: Optional[str] = Header(default=None),
) -> MemberOut:
    token = _bearer(authorization)
    if not token:
        raise LoginRequired(MEMBER_LOGIN_ROUTE, "Login required")

    user = auth.get_user(token)
    if user is None:
        raise LoginRequired(MEMBER_LOGIN_ROUTE, "Invalid or expired session")

    try:
        profile = db.get(Profile, UUID(user.id))
    except ValueError:
        profile = None
    if profile is None:
        raise LoginRequired(MEMBER_LOGIN_ROUTE, "Profile not found")

    return MemberOut(
        id=profile.id,
        email=user.email or profile.email,
        role=profile.role,
        name=profile.name,
        church=profile.church_name,
    )


def require_role(role: str) -> Callable[..., MemberOut]:
    """Dependency factory: a logged-in member whose profile carries `role`."""
    def _inner(member: MemberOut = Depends(require_member)) -> MemberOut:
        if member.role != role:
            raise LoginRequired("/unauthorized", f"Requires {role} role", status_code=403)
        return member
    return _inner
