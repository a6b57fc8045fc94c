# portal/services/participant_ids.py
"""
Participant code allocation.

A code is one prefix letter plus a three-digit number, e.g. ``T001`` or
``N014``. The prefix encodes role/section; the number is the lowest positive
integer not already used under that prefix, so gaps left by deletions are
reused before the sequence grows.

Allocation is a plain read followed by the caller's insert. Nothing locks the
prefix between the two, so concurrent registrations can be handed the same
code.
"""
from __future__ import annotations

import logging
import random
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal.models.participant import Participant

logger = logging.getLogger(__name__)

CODE_LENGTH = 4


def prefix_for(role: Optional[str], section: Optional[str] = None) -> str:
    if role == "teacher":
        return "T"
    if section:
        return section[0].upper()
    return "S"


def _format(prefix: str, number: int) -> str:
    return f"{prefix}{number:03d}"


def _random_code(prefix: str) -> str:
    return _format(prefix, random.randint(1, 999))


def used_numbers(codes: Iterable[str], prefix: str) -> List[int]:
    """Numeric suffixes of well-formed codes under `prefix`, ascending."""
    out: List[int] = []
    for code in codes:
        if not code or len(code) != CODE_LENGTH or not code.startswith(prefix):
            continue
        suffix = code[1:]
        if not (suffix.isascii() and suffix.isdigit()):
            continue
        out.append(int(suffix))
    return sorted(out)


def next_free_number(numbers: Iterable[int]) -> int:
    """Smallest positive integer absent from the ascending `numbers`."""
    candidate = 1
    for n in numbers:
        if n == candidate:
            candidate += 1
        elif n > candidate:
            break
    return candidate


def generate_unique_participant_id(db: Session, role: Optional[str], section: Optional[str] = None) -> str:
    prefix = prefix_for(role, section)
    try:
        codes = (
            db.execute(select(Participant.participant_id).where(Participant.participant_id.like(f"{prefix}%")))
            .scalars()
            .all()
        )
    except SQLAlchemyError:
        logger.exception("participant id lookup failed for prefix=%s; falling back to a random suffix", prefix)
        db.rollback()
        return _random_code(prefix)

    return _format(prefix, next_free_number(used_numbers(codes, prefix)))


def should_update_participant_id(current_id: Optional[str], new_role: Optional[str], new_section: Optional[str] = None) -> bool:
    if not current_id or len(current_id) != CODE_LENGTH:
        return True
    return current_id[0] != prefix_for(new_role, new_section)
