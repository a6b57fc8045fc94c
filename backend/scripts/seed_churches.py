# backend/scripts/seed_churches.py
"""
Seed the `Church` table that secretaries pick from at login.

Idempotent: a church is matched on (church_name, church_place) and only
inserted when missing.

Usage (from backend/):
  python scripts/seed_churches.py --church "Grace Church=Kochi" --church "Bethel AG=Thrissur"
  python scripts/seed_churches.py --file churches.json --dry-run

`churches.json` is a list of {"church_name": ..., "church_place": ...}.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List

# -----------------------------------------------------------------------------
# Paths & import setup (so "import portal" works regardless of CWD)
# -----------------------------------------------------------------------------
HERE = Path(__file__).resolve()
BACKEND_ROOT = HERE.parents[1]          # .../backend

if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from sqlalchemy import select  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

import portal.models  # noqa: E402,F401
from portal.db import SessionLocal  # noqa: E402
from portal.models.church import Church  # noqa: E402


def parse_pair(raw: str) -> Dict[str, str]:
    name, _, place = raw.partition("=")
    name = name.strip()
    if not name:
        raise argparse.ArgumentTypeError(f"church name missing in {raw!r}")
    return {"church_name": name, "church_place": place.strip()}


def load_file(path: Path) -> List[Dict[str, str]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise SystemExit(f"{path}: expected a JSON list")
    out = []
    for item in data:
        name = str(item.get("church_name", "")).strip()
        if not name:
            continue
        out.append({"church_name": name, "church_place": str(item.get("church_place", "")).strip()})
    return out


def upsert_churches(db: Session, churches: List[Dict[str, str]], dry_run: bool = False) -> int:
    created = 0
    for c in churches:
        exists = db.execute(
            select(Church.id).where(
                Church.church_name == c["church_name"],
                Church.church_place == c["church_place"],
            )
        ).first()
        if exists:
            print(f"= {c['church_name']} - {c['church_place']}")
            continue
        print(f"+ {c['church_name']} - {c['church_place']}")
        if not dry_run:
            db.add(Church(**c))
        created += 1
    if dry_run:
        db.rollback()
    else:
        db.commit()
    return created


def main() -> int:
    ap = argparse.ArgumentParser(description="Seed churches for the competition portal.")
    ap.add_argument("--church", dest="churches", action="append", type=parse_pair, default=[],
                    help='"Name=Place"; repeatable')
    ap.add_argument("--file", dest="file", type=Path, help="JSON list of churches")
    ap.add_argument("--dry-run", dest="dry_run", action="store_true")
    args = ap.parse_args()

    churches = list(args.churches)
    if args.file:
        churches.extend(load_file(args.file))
    if not churches:
        ap.error("nothing to seed; pass --church or --file")

    with SessionLocal() as db:
        created = upsert_churches(db, churches, dry_run=args.dry_run)
    print(f"{'would create' if args.dry_run else 'created'} {created} church(es)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
