# tests/test_roster.py
from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest

from portal.errors import ValidationFailed
from portal.services import roster
from portal.services.roster import RosterQuery

T0 = datetime(2025, 7, 1, 9, 0, tzinfo=timezone.utc)


def _row(i: int, **kw):
    base = {
        "id": i,
        "participant_id": f"N{i:03d}",
        "name": f"Child {i}",
        "role": "student",
        "section": "nursery",
        "competitions": ["quiz"],
        "secretary_id": "sec-1",
        "created_at": (T0 + timedelta(minutes=i)).isoformat(),
        "secretary": {"name": "Samuel", "church": "Grace Church"},
    }
    base.update(kw)
    return base


def _rows(n):
    return [_row(i) for i in range(1, n + 1)]


def test_timestamp_desc_is_chronological_regardless_of_insertion_order():
    rows = _rows(20)
    shuffled = rows[:]
    random.Random(7).shuffle(shuffled)
    out = roster.sort_rows(shuffled, "created_at", "desc")
    assert [r["id"] for r in out] == list(range(20, 0, -1))


def test_timestamp_compares_instants_not_strings():
    # Same instant-order, different offsets: 10:00+05:30 is 04:30Z, earlier than 05:00Z.
    a = _row(1, created_at="2025-07-01T10:00:00+05:30")
    b = _row(2, created_at="2025-07-01T05:00:00Z")
    assert [r["id"] for r in roster.sort_rows([b, a], "created_at", "asc")] == [1, 2]


def test_strings_sort_case_insensitively_and_stably():
    rows = [_row(1, name="bravo"), _row(2, name="Alpha"), _row(3, name="alpha"), _row(4, name="Charlie")]
    out = roster.sort_rows(rows, "name", "asc")
    assert [r["id"] for r in out] == [2, 3, 1, 4]
    out = roster.sort_rows(rows, "name", "desc")
    assert [r["id"] for r in out] == [4, 1, 2, 3]


def test_nulls_first_ascending_last_descending():
    rows = [_row(1, section="junior"), _row(2, section=None), _row(3, section="beginner")]
    assert [r["id"] for r in roster.sort_rows(rows, "section", "asc")] == [2, 3, 1]
    assert [r["id"] for r in roster.sort_rows(rows, "section", "desc")] == [1, 3, 2]


def test_sort_by_church_uses_owning_secretary():
    rows = [
        _row(1, secretary={"name": "B", "church": "Zion"}),
        _row(2, secretary={"name": "A", "church": "bethel"}),
        _row(3, secretary=None),
    ]
    assert [r["id"] for r in roster.sort_rows(rows, "church", "asc")] == [3, 2, 1]


def test_unmatched_competition_empties_and_clearing_restores():
    rows = _rows(12)
    q = RosterQuery(competition="musical instrumental")
    assert roster.filter_rows(rows, q) == []
    assert len(roster.filter_rows(rows, RosterQuery())) == 12


def test_filters_are_anded():
    rows = [
        _row(1, role="teacher", section=None, participant_id="T001"),
        _row(2, section="junior", competitions=["quiz", "memory verse"]),
        _row(3, section="junior", competitions=["memory verse"], secretary={"name": "X", "church": "Bethel"}),
    ]
    q = RosterQuery(section="junior", competition="memory verse", church="Grace Church")
    assert [r["id"] for r in roster.filter_rows(rows, q)] == [2]
    q = RosterQuery(role="teacher")
    assert [r["id"] for r in roster.filter_rows(rows, q)] == [1]


def test_search_matches_name_id_or_role():
    rows = [
        _row(1, name="Anna Joseph", participant_id="J001"),
        _row(2, name="Ben", participant_id="T004", role="teacher", section=None),
        _row(3, name="Carl", participant_id="N010"),
    ]
    assert [r["id"] for r in roster.filter_rows(rows, RosterQuery(search="joseph"))] == [1]
    assert [r["id"] for r in roster.filter_rows(rows, RosterQuery(search="n010"))] == [3]
    assert [r["id"] for r in roster.filter_rows(rows, RosterQuery(search="TEACH"))] == [2]


def test_pagination_47_by_25():
    rows = _rows(47)
    assert len(roster.paginate(rows, 1, 25)) == 25
    assert len(roster.paginate(rows, 2, 25)) == 22
    assert roster.paginate(rows, 3, 25) == []
    assert roster.total_pages(47, 25) == 2


def test_build_roster_summary():
    rows = _rows(47) + [_row(100, competitions=["speech competition"], secretary_id="sec-2",
                             secretary={"name": "Mary", "church": "Bethel AG"})]
    out = roster.build_roster(rows, RosterQuery(page=2, page_size=25, competition="quiz"))
    assert out["total"] == 48
    assert out["filtered"] == 47
    assert len(out["items"]) == 22
    assert (out["showing_from"], out["showing_to"]) == (26, 47)
    assert out["total_pages"] == 2
    assert out["active_filters"] == {"competition": "quiz"}
    assert out["facets"]["churches"] == ["Grace Church", "Bethel AG"]
    assert out["facets"]["secretary_ids"] == ["sec-1", "sec-2"]

    empty = roster.build_roster(rows, RosterQuery(page=9))
    assert empty["items"] == [] and empty["showing_from"] == 0


@pytest.mark.parametrize("kw", [{"page_size": 20}, {"page": 0}, {"sort_field": "phone"}, {"direction": "up"}])
def test_invalid_query_is_a_validation_error(kw):
    with pytest.raises(ValidationFailed) as ei:
        RosterQuery(**kw).validate()
    assert set(ei.value.fields) == set(kw)


def test_export_of_zero_rows_is_header_only():
    assert roster.export_csv([]) == '"ID","Name","Role","Section","Competitions","Church","Secretary","Registered"'


def test_export_rows_are_quoted_and_joined():
    rows = [
        _row(1, competitions=["quiz", "memory verse"], created_at="2025-07-01T09:01:00+00:00"),
        _row(2, role="teacher", section=None, participant_id="T001", competitions=[], secretary=None),
    ]
    lines = roster.export_csv(rows).split("\n")
    assert len(lines) == 3
    assert lines[1] == '"N001","Child 1","student","nursery","quiz; memory verse","Grace Church","Samuel","2025-07-01"'
    assert lines[2].startswith('"T001","Child 2","teacher","",""')


def test_export_filename():
    from datetime import date
    assert roster.export_filename(date(2025, 8, 9)) == "participants-2025-08-09.csv"
