# tests/test_participant_ids.py
from __future__ import annotations

import re
import uuid

import pytest
from sqlalchemy.exc import OperationalError

from portal.models.participant import Participant
from portal.models.profile import Profile
from portal.services.participant_ids import (
    generate_unique_participant_id,
    next_free_number,
    prefix_for,
    should_update_participant_id,
    used_numbers,
)

CODE = re.compile(r"^[A-Z]\d{3}$")


def _secretary(db) -> uuid.UUID:
    p = Profile(name="Sec", phone="9000000000")
    db.add(p)
    db.commit()
    return p.id


def _seed_codes(db, codes):
    sid = _secretary(db)
    for c in codes:
        db.add(Participant(participant_id=c, name=f"P {c}", role="student", section="nursery",
                           competitions=[], secretary_id=sid))
    db.commit()


@pytest.mark.parametrize(
    "role, section, prefix",
    [
        ("teacher", None, "T"),
        ("teacher", "junior", "T"),
        ("student", "nursery", "N"),
        ("student", "beginner", "B"),
        ("student", "primary", "P"),
        ("student", "junior", "J"),
        ("student", "senior", "S"),
        ("student", None, "S"),
    ],
)
def test_code_shape_and_prefix(db, role, section, prefix):
    code = generate_unique_participant_id(db, role, section)
    assert CODE.match(code)
    assert code[0] == prefix == prefix_for(role, section)
    assert code == f"{prefix}001"


def test_gap_is_filled_before_extending(db):
    _seed_codes(db, ["N001", "N002", "N004"])
    assert generate_unique_participant_id(db, "student", "nursery") == "N003"


def test_sequence_extends_when_dense(db):
    _seed_codes(db, ["N001", "N002", "N003", "T001"])
    assert generate_unique_participant_id(db, "student", "nursery") == "N004"
    assert generate_unique_participant_id(db, "teacher") == "T002"


def test_malformed_codes_are_ignored(db):
    _seed_codes(db, ["N1", "N0001", "NX01", "N²01", "N002"])
    assert generate_unique_participant_id(db, "student", "nursery") == "N001"


def test_used_numbers_and_next_free():
    assert used_numbers(["J003", "J001", "T002", "J01", "Jabc"], "J") == [1, 3]
    assert next_free_number([]) == 1
    assert next_free_number([2, 3]) == 1
    assert next_free_number([1, 2, 3]) == 4


class _BrokenSession:
    def __init__(self):
        self.rolled_back = False

    def execute(self, *a, **kw):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    def rollback(self):
        self.rolled_back = True


def test_lookup_failure_falls_back_to_random_suffix():
    s = _BrokenSession()
    code = generate_unique_participant_id(s, "student", "primary")
    assert CODE.match(code)
    assert code.startswith("P")
    assert 1 <= int(code[1:]) <= 999
    assert s.rolled_back


def test_should_update_participant_id():
    assert should_update_participant_id("N001", "teacher", None) is True
    assert should_update_participant_id("T001", "teacher", None) is False
    assert should_update_participant_id("N001", "student", "nursery") is False
    assert should_update_participant_id("N001", "student", "junior") is True
    assert should_update_participant_id("S004", "student", None) is False
    assert should_update_participant_id("", "teacher") is True
    assert should_update_participant_id("T01", "teacher") is True
    assert should_update_participant_id(None, "student", "senior") is True
