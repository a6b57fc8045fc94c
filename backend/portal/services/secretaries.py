# portal/services/secretaries.py
"""
Secretary login / self-registration and the organizer passkey check.

Secretaries identify themselves by phone number. A church may have only one
secretary; this is checked by reading the profile that already holds the
church before writing, which two simultaneous logins can both pass.
"""
from __future__ import annotations

import hmac
import logging
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from portal import config
from portal.errors import ErrorKind, PortalError, ValidationFailed
from portal.models.church import Church
from portal.models.profile import Profile, ProfileRole
from portal.models.session import SessionKind
from portal.schemas.secretaries import OrganizerLogin, ReturningSecretary, SecretaryLogin
from portal.services import sessions

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(phone: Optional[str]) -> str:
    return _NON_DIGITS.sub("", phone or "")


def list_churches(db: Session) -> List[Church]:
    return db.execute(select(Church).order_by(Church.church_name.asc())).scalars().all()


def _parse_church_id(raw) -> Optional[int]:
    if raw is None or str(raw).strip() == "":
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def validate_login(form: SecretaryLogin) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    name = (form.name or "").strip()
    if not name:
        errors["name"] = "Name is required"
    elif len(name) < 2:
        errors["name"] = "Name must be at least 2 characters"

    if not (form.phone or "").strip():
        errors["phone"] = "Mobile number is required"
    elif len(normalize_phone(form.phone)) != 10:
        errors["phone"] = "Please enter a valid 10-digit mobile number"

    if form.church_id is None or str(form.church_id).strip() == "":
        errors["church_id"] = "Please select a church"
    elif _parse_church_id(form.church_id) is None:
        errors["church_id"] = "Selected church not found"
    return errors


def _secretary_by_phone(db: Session, phone: str) -> Optional[Profile]:
    return (
        db.execute(
            select(Profile)
            .where(Profile.phone == phone, Profile.role == ProfileRole.secretary.value)
            .order_by(Profile.created_at.asc())
        )
        .scalars()
        .first()
    )


def _secretary_for_church(db: Session, church_id: int) -> Optional[Profile]:
    return (
        db.execute(
            select(Profile)
            .where(Profile.church_id == church_id, Profile.role == ProfileRole.secretary.value)
            .order_by(Profile.created_at.asc())
        )
        .scalars()
        .first()
    )


def lookup_secretary_by_phone(db: Session, phone: str) -> Optional[ReturningSecretary]:
    """Returning-secretary hint shown while the phone number is typed."""
    digits = normalize_phone(phone)
    if len(digits) != 10:
        return None
    profile = _secretary_by_phone(db, digits)
    if profile is None or profile.church_ref is None:
        return None
    return ReturningSecretary(name=profile.name, church=profile.church_ref.label, church_id=profile.church_id)


def login_secretary(db: Session, form: SecretaryLogin) -> tuple[str, dict]:
    errors = validate_login(form)
    if errors:
        raise ValidationFailed(errors)

    name = form.name.strip()
    phone = normalize_phone(form.phone)
    church_id = _parse_church_id(form.church_id)

    church = db.get(Church, church_id)
    if church is None:
        raise ValidationFailed({"church_id": "Selected church not found"})

    existing = _secretary_by_phone(db, phone)

    if existing is None or existing.church_id != church_id:
        holder = _secretary_for_church(db, church_id)
        if holder is not None and holder.phone != phone:
            logger.warning(
                "secretary login rejected: church_id=%s already held by profile=%s", church_id, holder.id
            )
            verb = "switch to" if existing is not None else "register for"
            raise PortalError(
                ErrorKind.conflict,
                f"Cannot {verb} {church.church_name}: this church already has a registered secretary "
                f"({holder.name}). Only one secretary per church is allowed.",
            )

    if existing is not None:
        existing.name = name
        existing.church_id = church_id
        profile = existing
        logger.info("returning secretary profile=%s church_id=%s", profile.id, church_id)
    else:
        profile = Profile(name=name, phone=phone, church_id=church_id, role=ProfileRole.secretary.value)
        db.add(profile)
        logger.info("new secretary for church_id=%s", church_id)
    db.commit()
    db.refresh(profile)

    payload = {
        "id": str(profile.id),
        "name": name,
        "phone": phone,
        "church": church.church_name,
        "church_place": church.church_place,
        "church_id": church_id,
        "login_time": datetime.now(timezone.utc).isoformat(),
        "is_returning_secretary": existing is not None,
    }
    token, _ = sessions.open_session(db, SessionKind.secretary, payload, profile_id=profile.id)
    return token, payload


def passkey_matches(entered: str) -> bool:
    """
    Compare an entered passkey with the configured constant.

    This only locks the organizer screens. Anyone who knows the shared string
    gets in; there is no server-side identity or credential store behind it.
    """
    return hmac.compare_digest((entered or "").encode("utf-8"), config.organizer_passkey().encode("utf-8"))


def login_organizer(db: Session, form: OrganizerLogin) -> tuple[str, dict]:
    if not (form.passkey or "").strip():
        raise ValidationFailed({"passkey": "Please enter the passkey"})
    if not passkey_matches(form.passkey):
        logger.warning("organizer login rejected: bad passkey")
        raise ValidationFailed({"passkey": "Invalid passkey. Please try again."}, "Invalid passkey")

    payload = {
        "role": "organizer",
        "login_time": datetime.now(timezone.utc).isoformat(),
        "authorized": True,
    }
    token, _ = sessions.open_session(db, SessionKind.organizer, payload)
    return token, payload
