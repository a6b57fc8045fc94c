# scripts/smoke_portal.py
"""
End-to-end smoke against a running server:
secretary login -> add participant -> organizer login -> roster -> CSV export.

  python scripts/smoke_portal.py --church-id 1 --phone 9876500000
"""
from __future__ import annotations
import argparse, os, sys, uuid

try:
    import requests  # type: ignore
except ModuleNotFoundError:
    print("ERROR: requests not installed. Run: pip install requests", file=sys.stderr)
    raise

def req(method: str, url: str, token: str | None = None, json_body: dict | None = None, params: dict | None = None):
    headers = {"Content-Type": "application/json"}
    if token: headers["X-Session-Token"] = token
    r = requests.request(method, url, headers=headers, json=json_body, params=params, timeout=15)
    try: body = r.json()
    except Exception: body = r.text
    return r.status_code, body

def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--church-id", required=True)
    ap.add_argument("--phone", required=True, help="10-digit phone of the church's secretary")
    ap.add_argument("--name", default="Smoke Secretary")
    ap.add_argument("--passkey", default=os.getenv("ORGANIZER_PASSKEY", "CHURCH2025ADMIN"))
    ap.add_argument("--base-url", default=os.getenv("BASE_URL", "http://127.0.0.1:8000"))
    args = ap.parse_args()

    base = args.base_url.rstrip("/")

    # 1) Secretary login
    s, b = req("POST", f"{base}/secretary/login", json_body={
        "name": args.name, "phone": args.phone, "church_id": args.church_id,
    })
    if s != 200: print("❌ secretary login failed", s, b, file=sys.stderr); return 1
    sec_token = b["token"]; print(f"✅ secretary logged in: {b['data']['name']} @ {b['data']['church']}")

    # 2) Add participant
    name = f"Smoke {uuid.uuid4().hex[:6]}"
    s, b = req("POST", f"{base}/secretary/participants", sec_token, {
        "name": name, "role": "student", "section": "junior", "competitions": ["quiz"],
    })
    if s != 201: print("❌ add participant failed", s, b, file=sys.stderr); return 1
    row_id = b["id"]; print(f"✅ participant added: {b['participant_id']} {name}")

    # 3) Organizer login
    s, b = req("POST", f"{base}/organizer/login", json_body={"passkey": args.passkey})
    if s != 200: print("❌ organizer login failed", s, b, file=sys.stderr); return 1
    org_token = b["token"]; print("✅ organizer logged in")

    # 4) Roster search
    s, b = req("GET", f"{base}/organizer/participants", org_token, params={"search": name})
    if s != 200 or b.get("filtered") != 1: print("❌ roster search failed", s, b, file=sys.stderr); return 1
    print(f"✅ roster found participant ({b['total']} total)")

    # 5) Export
    r = requests.get(f"{base}/organizer/participants/export", headers={"X-Session-Token": org_token},
                     params={"search": name}, timeout=15)
    if r.status_code != 200 or name not in r.text: print("❌ export failed", r.status_code, r.text, file=sys.stderr); return 1
    print("✅ export contains participant")

    # cleanup
    req("DELETE", f"{base}/secretary/participants/{row_id}", sec_token)
    req("POST", f"{base}/secretary/logout", sec_token)
    req("POST", f"{base}/organizer/logout", org_token)

    print("🎉 SMOKE PASSED"); return 0

if __name__ == "__main__":
    raise SystemExit(main())
