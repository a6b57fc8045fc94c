# portal/api/secretary.py
from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from portal.db import get_db
from portal.dependencies import current_secretary_id, require_secretary_session, session_token
from portal.schemas.participants import ParticipantCreate, ParticipantRead, ParticipantUpdate
from portal.schemas.secretaries import ReturningSecretary, SecretaryLogin
from portal.schemas.sessions import PortalSessionData, SessionOut
from portal.services import participants as svc
from portal.services import sessions
from portal.services.secretaries import login_secretary, lookup_secretary_by_phone

router = APIRouter(prefix="/secretary", tags=["Secretary"])
logger = logging.getLogger(__name__)

DASHBOARD_ROUTE = "/secretary/dashboard"


@router.post("/login", response_model=SessionOut)
def login(
    payload: SecretaryLogin,
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(session_token),
) -> SessionOut:
    # A login always starts from a clean slate: drop whatever marker was presented.
    sessions.close_session(db, token)
    sessions.purge_expired(db)

    new_token, data = login_secretary(db, payload)
    resolved = sessions.resolve_session(db, new_token, sessions.SessionKind.secretary)
    return SessionOut(
        token=new_token,
        kind=resolved.kind,
        expires_at=resolved.expires_at,
        redirect=DASHBOARD_ROUTE,
        data=data,
    )


@router.get("/lookup", response_model=Optional[ReturningSecretary])
def lookup(phone: str = Query(..., description="Mobile number as typed"), db: Session = Depends(get_db)):
    return lookup_secretary_by_phone(db, phone)


@router.get("/me", response_model=PortalSessionData)
def me(session: PortalSessionData = Depends(require_secretary_session)) -> PortalSessionData:
    return session


@router.post("/logout", status_code=204, response_class=Response)
def logout(db: Session = Depends(get_db), token: Optional[str] = Depends(session_token)) -> Response:
    sessions.close_session(db, token)
    return Response(status_code=204)


@router.get("/participants", response_model=List[ParticipantRead])
def list_participants(
    db: Session = Depends(get_db),
    secretary_id: UUID = Depends(current_secretary_id),
):
    return svc.list_for_secretary(db, secretary_id)


@router.post("/participants", response_model=ParticipantRead, status_code=status.HTTP_201_CREATED)
def add_participant(
    payload: ParticipantCreate,
    db: Session = Depends(get_db),
    secretary_id: UUID = Depends(current_secretary_id),
):
    logger.info("add_participant role=%s section=%s secretary=%s", payload.role, payload.section, secretary_id)
    return svc.create_participant(db, secretary_id, payload)


@router.patch("/participants/{row_id}", response_model=ParticipantRead)
def edit_participant(
    row_id: int,
    payload: ParticipantUpdate,
    db: Session = Depends(get_db),
    secretary_id: UUID = Depends(current_secretary_id),
):
    return svc.update_participant(db, secretary_id, row_id, payload)


# 204 must have no body; use Response explicitly
@router.delete("/participants/{row_id}", status_code=204, response_class=Response)
def remove_participant(
    row_id: int,
    db: Session = Depends(get_db),
    secretary_id: UUID = Depends(current_secretary_id),
) -> Response:
    svc.delete_participant(db, secretary_id, row_id)
    return Response(status_code=204)
