# portal/services/participants.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from portal.errors import ErrorKind, PortalError, ValidationFailed
from portal.models.participant import Participant
from portal.schemas.participants import (
    COMPETITIONS,
    ROLES,
    SECTIONS,
    ParticipantCreate,
    ParticipantUpdate,
)
from portal.services.participant_ids import generate_unique_participant_id, should_update_participant_id

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Validation
# ─────────────────────────────────────────────────────────────────────────────

def _dedupe(items: List[str]) -> List[str]:
    seen: List[str] = []
    for i in items:
        if i not in seen:
            seen.append(i)
    return seen


def clean_fields(name: Optional[str], role: Optional[str], section: Optional[str], competitions: Optional[List[str]]) -> Dict[str, Any]:
    """Validate a full participant record; returns the normalized fields or raises ValidationFailed."""
    errors: Dict[str, str] = {}

    name = (name or "").strip()
    if not name:
        errors["name"] = "Participant name is required"

    role = (role or "").strip().lower()
    if role not in ROLES:
        errors["role"] = f"Role must be one of {', '.join(ROLES)}"

    section = (section or "").strip().lower() or None
    if role == "teacher":
        section = None
    elif role == "student":
        if section is None:
            errors["section"] = "Section is required for students"
        elif section not in SECTIONS:
            errors["section"] = f"Section must be one of {', '.join(SECTIONS)}"

    comps = _dedupe([(c or "").strip().lower() for c in (competitions or [])])
    unknown = [c for c in comps if c not in COMPETITIONS]
    if unknown:
        errors["competitions"] = f"Unknown competition(s): {', '.join(unknown)}"

    if errors:
        raise ValidationFailed(errors)
    return {"name": name, "role": role, "section": section, "competitions": comps}


# ─────────────────────────────────────────────────────────────────────────────
# CRUD (scoped to the owning secretary)
# ─────────────────────────────────────────────────────────────────────────────

def list_for_secretary(db: Session, secretary_id: UUID) -> List[Participant]:
    stmt = (
        select(Participant)
        .where(Participant.secretary_id == secretary_id)
        .order_by(Participant.created_at.asc(), Participant.id.asc())
    )
    return db.execute(stmt).scalars().all()


def get_owned(db: Session, secretary_id: UUID, row_id: int) -> Participant:
    p = db.get(Participant, row_id)
    if p is None or p.secretary_id != secretary_id:
        raise PortalError(ErrorKind.not_found, "Participant not found")
    return p


def create_participant(db: Session, secretary_id: UUID, data: ParticipantCreate) -> Participant:
    fields = clean_fields(data.name, data.role, data.section, data.competitions)
    code = generate_unique_participant_id(db, fields["role"], fields["section"])

    p = Participant(participant_id=code, secretary_id=secretary_id, **fields)
    db.add(p)
    db.commit()
    db.refresh(p)
    logger.info("participant created id=%s code=%s secretary=%s", p.id, p.participant_id, secretary_id)
    return p


def update_participant(db: Session, secretary_id: UUID, row_id: int, patch: ParticipantUpdate) -> Participant:
    p = get_owned(db, secretary_id, row_id)
    changes = patch.model_dump(exclude_unset=True)

    merged = {
        "name": changes.get("name", p.name),
        "role": changes.get("role", p.role),
        "section": changes["section"] if "section" in changes else p.section,
        "competitions": changes["competitions"] if changes.get("competitions") is not None else list(p.competitions or []),
    }
    fields = clean_fields(**merged)

    if should_update_participant_id(p.participant_id, fields["role"], fields["section"]):
        old = p.participant_id
        p.participant_id = generate_unique_participant_id(db, fields["role"], fields["section"])
        logger.info("participant id=%s recoded %s -> %s", p.id, old, p.participant_id)

    for k, v in fields.items():
        setattr(p, k, v)

    db.add(p)
    db.commit()
    db.refresh(p)
    logger.info("participant updated id=%s fields=%s", p.id, sorted(changes))
    return p


def delete_participant(db: Session, secretary_id: UUID, row_id: int) -> None:
    p = get_owned(db, secretary_id, row_id)
    db.delete(p)
    db.commit()
    logger.info("participant deleted id=%s code=%s", row_id, p.participant_id)


# ─────────────────────────────────────────────────────────────────────────────
# Organizer view
# ─────────────────────────────────────────────────────────────────────────────

def to_roster_row(p: Participant) -> Dict[str, Any]:
    sec = p.secretary
    return {
        "id": p.id,
        "participant_id": p.participant_id,
        "name": p.name,
        "role": p.role,
        "section": p.section,
        "competitions": list(p.competitions or []),
        "secretary_id": str(p.secretary_id),
        "created_at": p.created_at,
        "secretary": {
            "name": sec.name if sec else None,
            "church": sec.church_name if sec else None,
        },
    }


def roster_rows(db: Session) -> List[Dict[str, Any]]:
    rows = db.execute(select(Participant).order_by(Participant.name.asc())).scalars().all()
    return [to_roster_row(p) for p in rows]


def roster_stats(rows: List[Dict[str, Any]]) -> Dict[str, int]:
    return {
        "total_participants": len(rows),
        "churches_registered": len({r["secretary_id"] for r in rows}),
    }
