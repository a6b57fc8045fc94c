# tests/test_errors_and_system.py
from __future__ import annotations

from sqlalchemy.exc import IntegrityError, NoResultFound, OperationalError, ProgrammingError

from portal.errors import ErrorKind, normalize_db_error


def test_db_errors_fold_into_closed_kinds():
    assert normalize_db_error(IntegrityError("INSERT", {}, Exception("dup"))).kind == ErrorKind.conflict
    assert normalize_db_error(OperationalError("SELECT", {}, Exception("down"))).kind == ErrorKind.transient
    assert normalize_db_error(NoResultFound()).kind == ErrorKind.not_found
    err = normalize_db_error(ProgrammingError("SELECT", {}, Exception("bad sql")))
    assert err.kind == ErrorKind.unknown
    assert err.status_code == 500


def test_health_and_version(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["db"]["status"] == "ok"

    r = client.get("/version")
    assert r.status_code == 200
    assert r.json()["app"] == "Church Competition Portal"
