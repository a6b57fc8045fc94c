# portal/services/roster.py
"""
In-memory roster pipeline for the organizer dashboard.

Rows are plain dicts (``participant_id``, ``name``,
``role``, ``section``, ``competitions``, ``secretary_id``, ``created_at`` and a
nested ``secretary`` dict with ``name``/``church``). The pipeline is
sort -> filter -> paginate; export takes the sorted and filtered set before
pagination.
"""
from __future__ import annotations

import csv
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from io import StringIO
from typing import Any, Dict, Iterable, List, Optional

from portal.errors import ValidationFailed

PAGE_SIZES = (10, 25, 50, 100)
DEFAULT_PAGE_SIZE = 25

SORT_FIELDS = ("participant_id", "name", "role", "section", "church", "secretary", "created_at")
TIMESTAMP_FIELD = "created_at"

CSV_HEADER = ["ID", "Name", "Role", "Section", "Competitions", "Church", "Secretary", "Registered"]

Row = Dict[str, Any]


@dataclass
class RosterQuery:
    sort_field: str = TIMESTAMP_FIELD
    direction: str = "desc"
    search: str = ""
    role: str = ""
    section: str = ""
    competition: str = ""
    church: str = ""
    secretary_id: str = ""
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def validate(self) -> "RosterQuery":
        errors: Dict[str, str] = {}
        if self.sort_field not in SORT_FIELDS:
            errors["sort_field"] = f"Unknown sort field; expected one of {', '.join(SORT_FIELDS)}"
        if self.direction not in ("asc", "desc"):
            errors["direction"] = "Direction must be 'asc' or 'desc'"
        if self.page_size not in PAGE_SIZES:
            errors["page_size"] = f"Page size must be one of {', '.join(map(str, PAGE_SIZES))}"
        if self.page < 1:
            errors["page"] = "Page numbers start at 1"
        if errors:
            raise ValidationFailed(errors, "Invalid roster query")
        return self

    def active_filters(self) -> Dict[str, str]:
        keys = ("search", "church", "role", "section", "competition", "secretary_id")
        return {k: getattr(self, k) for k in keys if getattr(self, k)}


# ─────────────────────────────────────────────────────────────────────────────
# Field access
# ─────────────────────────────────────────────────────────────────────────────

def _secretary(row: Row) -> Row:
    return row.get("secretary") or {}


def field_value(row: Row, field: str) -> Any:
    if field == "church":
        return _secretary(row).get("church")
    if field == "secretary":
        return _secretary(row).get("name")
    return row.get(field)


def parse_instant(value: Any) -> Optional[datetime]:
    """Timestamp (datetime or ISO string) as an aware UTC datetime; naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _sort_key(row: Row, field: str) -> Any:
    value = field_value(row, field)
    if field == TIMESTAMP_FIELD:
        return parse_instant(value)
    if isinstance(value, str):
        return value.lower()
    return value


# ─────────────────────────────────────────────────────────────────────────────
# Pipeline stages
# ─────────────────────────────────────────────────────────────────────────────

def sort_rows(rows: Iterable[Row], field: str = TIMESTAMP_FIELD, direction: str = "desc") -> List[Row]:
    """Stable sort; missing values go first ascending and last descending."""
    keyed = [(_sort_key(r, field), r) for r in rows]
    present = [(k, r) for k, r in keyed if k is not None]
    missing = [r for k, r in keyed if k is None]

    descending = direction == "desc"
    ordered = [r for _, r in sorted(present, key=lambda kr: kr[0], reverse=descending)]
    return ordered + missing if descending else missing + ordered


def _contains(haystack: Any, needle: str) -> bool:
    return needle in str(haystack or "").lower()


def row_matches(row: Row, query: RosterQuery) -> bool:
    if query.search:
        needle = query.search.lower()
        if not (
            _contains(row.get("name"), needle)
            or _contains(row.get("participant_id"), needle)
            or _contains(row.get("role"), needle)
        ):
            return False
    if query.role and row.get("role") != query.role:
        return False
    if query.section and row.get("section") != query.section:
        return False
    if query.competition and query.competition not in (row.get("competitions") or []):
        return False
    if query.church and field_value(row, "church") != query.church:
        return False
    if query.secretary_id and str(row.get("secretary_id") or "") != query.secretary_id:
        return False
    return True


def filter_rows(rows: Iterable[Row], query: RosterQuery) -> List[Row]:
    return [r for r in rows if row_matches(r, query)]


def total_pages(count: int, page_size: int) -> int:
    return math.ceil(count / page_size) if count else 0


def paginate(rows: List[Row], page: int, page_size: int) -> List[Row]:
    """1-based page slice; a page past the end is empty."""
    start = (page - 1) * page_size
    return rows[start:start + page_size]


def facets(rows: Iterable[Row]) -> Dict[str, List[str]]:
    """Distinct filter options, in first-seen order."""
    out: Dict[str, List[str]] = {
        "churches": [], "roles": [], "sections": [], "competitions": [], "secretary_ids": [],
    }

    def _add(key: str, value: Any) -> None:
        if value and value not in out[key]:
            out[key].append(value)

    for r in rows:
        _add("churches", field_value(r, "church"))
        _add("roles", r.get("role"))
        _add("sections", r.get("section"))
        for c in r.get("competitions") or []:
            _add("competitions", c)
        if r.get("secretary_id"):
            _add("secretary_ids", str(r["secretary_id"]))
    return out


def select_rows(rows: Iterable[Row], query: RosterQuery) -> List[Row]:
    """Sorted and filtered rows, before pagination (what export writes)."""
    return filter_rows(sort_rows(rows, query.sort_field, query.direction), query)


def build_roster(rows: Iterable[Row], query: RosterQuery) -> Dict[str, Any]:
    query.validate()
    rows = list(rows)
    selected = select_rows(rows, query)
    page_rows = paginate(selected, query.page, query.page_size)
    start = (query.page - 1) * query.page_size

    return {
        "items": page_rows,
        "total": len(rows),
        "filtered": len(selected),
        "page": query.page,
        "page_size": query.page_size,
        "total_pages": total_pages(len(selected), query.page_size),
        "showing_from": start + 1 if page_rows else 0,
        "showing_to": start + len(page_rows),
        "sort_field": query.sort_field,
        "direction": query.direction,
        "active_filters": query.active_filters(),
        "facets": facets(rows),
    }


# ─────────────────────────────────────────────────────────────────────────────
# Export
# ─────────────────────────────────────────────────────────────────────────────

def _registered(value: Any) -> str:
    instant = parse_instant(value)
    return instant.date().isoformat() if instant else ""


def csv_record(row: Row) -> List[str]:
    return [
        row.get("participant_id") or "",
        row.get("name") or "",
        row.get("role") or "",
        row.get("section") or "",
        "; ".join(row.get("competitions") or []),
        field_value(row, "church") or "",
        field_value(row, "secretary") or "",
        _registered(row.get("created_at")),
    ]


def export_csv(rows: Iterable[Row]) -> str:
    buf = StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for r in rows:
        writer.writerow(csv_record(r))
    # Rows are joined by newlines with no trailing one.
    return buf.getvalue().rstrip("\n")


def export_filename(today: Optional[date] = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"participants-{today.isoformat()}.csv"
