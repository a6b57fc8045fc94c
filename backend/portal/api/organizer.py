# portal/api/organizer.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from portal.db import get_db
from portal.dependencies import require_organizer_session, session_token
from portal.schemas.secretaries import OrganizerLogin
from portal.schemas.sessions import SessionOut
from portal.services import participants as svc
from portal.services import roster, sessions
from portal.services.secretaries import login_organizer

router = APIRouter(prefix="/organizer", tags=["Organizer"])

DASHBOARD_ROUTE = "/organizer/dashboard"


def roster_query(
    sort_field: str = Query(roster.TIMESTAMP_FIELD, description="participant_id | name | role | section | church | secretary | created_at"),
    direction: str = Query("desc", description="'asc' or 'desc'"),
    search: str = Query("", description="Name, ID or role substring"),
    role: str = "",
    section: str = "",
    competition: str = "",
    church: str = "",
    secretary_id: str = "",
    page: int = 1,
    page_size: int = Query(roster.DEFAULT_PAGE_SIZE, description="10, 25, 50 or 100"),
) -> roster.RosterQuery:
    return roster.RosterQuery(
        sort_field=sort_field,
        direction=direction,
        search=search.strip(),
        role=role,
        section=section,
        competition=competition,
        church=church,
        secretary_id=secretary_id,
        page=page,
        page_size=page_size,
    ).validate()


@router.post("/login", response_model=SessionOut)
def login(
    payload: OrganizerLogin,
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(session_token),
) -> SessionOut:
    sessions.close_session(db, token)
    sessions.purge_expired(db)

    new_token, data = login_organizer(db, payload)
    resolved = sessions.resolve_session(db, new_token, sessions.SessionKind.organizer)
    return SessionOut(
        token=new_token,
        kind=resolved.kind,
        expires_at=resolved.expires_at,
        redirect=DASHBOARD_ROUTE,
        data=data,
    )


@router.post("/logout", status_code=204, response_class=Response)
def logout(db: Session = Depends(get_db), token: Optional[str] = Depends(session_token)) -> Response:
    sessions.close_session(db, token)
    return Response(status_code=204)


@router.get("/participants", dependencies=[Depends(require_organizer_session)])
def list_participants(
    query: roster.RosterQuery = Depends(roster_query),
    db: Session = Depends(get_db),
):
    rows = svc.roster_rows(db)
    out = roster.build_roster(rows, query)
    out["stats"] = svc.roster_stats(rows)
    return out


@router.get("/participants/export", dependencies=[Depends(require_organizer_session)])
def export_participants(
    query: roster.RosterQuery = Depends(roster_query),
    db: Session = Depends(get_db),
) -> Response:
    selected = roster.select_rows(svc.roster_rows(db), query)
    return Response(
        content=roster.export_csv(selected),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{roster.export_filename()}"'},
    )
