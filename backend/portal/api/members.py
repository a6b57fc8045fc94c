# portal/api/members.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from portal.db import get_db
from portal.dependencies import require_member, require_role
from portal.schemas.members import MemberLogin, MemberOut, MemberRegister, MemberSession
from portal.services import participants as svc
from portal.services.member_auth import AuthFailed, MemberAuth, get_member_auth, login_member, register_member

router = APIRouter(prefix="/members", tags=["Members"])


@router.post("/register", response_model=MemberSession, status_code=status.HTTP_201_CREATED)
def register(
    payload: MemberRegister,
    db: Session = Depends(get_db),
    auth: MemberAuth = Depends(get_member_auth),
) -> MemberSession:
    result = register_member(db, auth, payload)
    return MemberSession(
        access_token=result.access_token,
        user_id=result.user.id if result.user else None,
    )


@router.post("/login", response_model=MemberSession)
def login(payload: MemberLogin, auth: MemberAuth = Depends(get_member_auth)) -> MemberSession:
    try:
        result = login_member(auth, payload)
    except AuthFailed as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e) or "Invalid login credentials")
    return MemberSession(
        access_token=result.access_token,
        user_id=result.user.id if result.user else None,
    )


@router.get("/me", response_model=MemberOut)
def me(member: MemberOut = Depends(require_member)) -> MemberOut:
    return member


@router.get("/roster-stats")
def roster_stats(
    db: Session = Depends(get_db),
    member: MemberOut = Depends(require_role("organizer")),
):
    return svc.roster_stats(svc.roster_rows(db))
