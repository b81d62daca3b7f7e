#!/usr/bin/env python3
"""
Smoke E2E test — walks the campaign wizard end to end over HTTP.

Creates a campaign through all six steps and submits it for approval,
then checks it shows up in the campaign list. Needs a running server with
its tables created (AUTO_CREATE_TABLES=true or alembic upgrade head).

Env vars:
  BASE_URL        (default http://localhost:8000)
  BRAND_PASSWORD  (optional, when ADMIN_PASSWORD is set on the server)
"""
from __future__ import annotations

import json
import os
import sys
import time
from datetime import date, timedelta
from urllib.request import Request, urlopen
from urllib.error import HTTPError, URLError

BASE_URL = os.environ.get("BASE_URL", "http://localhost:8000").rstrip("/")
BRAND_PASSWORD = os.environ.get("BRAND_PASSWORD", "")

SMOKE_TAG = f"smoke_{int(time.time())}"
_token: str | None = None

# ── Helpers ──────────────────────────────────────────────────

class SmokeError(Exception):
    pass


def _headers() -> dict[str, str]:
    h = {"Content-Type": "application/json"}
    if _token:
        h["Authorization"] = f"Bearer {_token}"
    return h


def _req(method: str, path: str, body: dict | None = None, expect: int = 200) -> dict:
    url = f"{BASE_URL}{path}"
    data = json.dumps(body).encode() if body is not None else None
    req = Request(url, data=data, headers=_headers(), method=method)
    try:
        with urlopen(req, timeout=30) as resp:
            raw = resp.read().decode()
            return json.loads(raw) if raw else {}
    except HTTPError as e:
        raw = e.read().decode()[:500]
        if e.code == expect:
            return json.loads(raw) if raw else {}
        raise SmokeError(f"{method} {path} → {e.code}: {raw}")
    except URLError as e:
        raise SmokeError(f"{method} {path} → URLError: {e}")


def GET(path: str) -> dict:
    return _req("GET", path)


def POST(path: str, body: dict | None = None, expect: int = 200) -> dict:
    return _req("POST", path, body, expect)


def PATCH(path: str, body: dict | None = None) -> dict:
    return _req("PATCH", path, body)


def PUT(path: str, body: dict | None = None) -> dict:
    return _req("PUT", path, body)


def step(name: str):
    print(f"\n{'='*60}")
    print(f"  STEP: {name}")
    print(f"{'='*60}")


def ok(msg: str):
    print(f"  ✅ {msg}")


def fail(msg: str):
    print(f"  ❌ {msg}")
    raise SmokeError(msg)


def set_fields(sid: str, fields: dict) -> dict:
    state = {}
    for path, value in fields.items():
        state = PATCH(f"/api/wizard/sessions/{sid}/fields", {"path": path, "value": value})
    return state


def advance(sid: str, expected_step: int) -> dict:
    state = POST(f"/api/wizard/sessions/{sid}/advance")
    if state["current_step"] != expected_step and not state["review_ready"]:
        fail(f"Expected step {expected_step}, wizard is at {state['current_step']}")
    return state


# ── Steps ────────────────────────────────────────────────────

def step1_health():
    step("1. Health check")
    data = GET("/ping")
    if data.get("status") != "ok":
        fail(f"Ping failed: {data}")
    ok("Server is up")


def step2_login():
    global _token
    step("2. Login")
    if not BRAND_PASSWORD:
        ok("No password given, assuming dev mode")
        return
    data = POST("/api/auth/login", {"password": BRAND_PASSWORD})
    _token = data["token"]
    ok(f"Token expires at {data['expires_at']}")


def step3_start() -> str:
    step("3. Start wizard")
    state = POST("/api/wizard/sessions", expect=201)
    sid = state["session_id"]
    ok(f"Session {sid[:8]}… at step {state['current_step']}")

    rejected = POST(f"/api/wizard/sessions/{sid}/advance", expect=409)
    if rejected.get("step") != 0:
        fail(f"Empty details step was not rejected: {rejected}")
    ok("Empty details step rejected")
    return sid


def step4_details(sid: str):
    step("4. Details + platforms")
    set_fields(sid, {"title": f"Smoke campaign {SMOKE_TAG}", "goal": "awareness"})
    advance(sid, 1)
    POST(f"/api/wizard/sessions/{sid}/platforms/tiktok/toggle")
    state = set_fields(sid, {"content_type": "both"})
    tags = state["draft"]["hashtags"]
    if tags["original"] == tags["repurposed"]:
        fail(f"Hashtags not disambiguated: {tags}")
    ok(f"Hashtags: {tags['original']!r} / {tags['repurposed']!r}")
    advance(sid, 2)


def step5_creative(sid: str):
    step("5. Creative brief")
    start = date.today() + timedelta(days=1)
    set_fields(sid, {
        "brief": "Show the product in your morning routine.",
        "guidelines": ["Mention the brand in the first 3 seconds"],
        "date_range.start": start.isoformat(),
        "date_range.end": (start + timedelta(days=30)).isoformat(),
    })
    advance(sid, 3)
    ok("Creative step complete")


def step6_budget(sid: str):
    step("6. Budget & payouts")
    set_fields(sid, {"budget": "5000"})
    state = PUT(f"/api/wizard/sessions/{sid}/allocation", {"original": 70})
    est = state["estimate"]
    if round(est["total_views"]) != 13_000_000:
        fail(f"Unexpected estimate: {est}")
    ok(f"Estimated reach {est['total_views']:,.0f} views")
    state = advance(sid, 4)
    methods = state.get("payment_methods") or []
    ok(f"Payment methods offered: {[m['id'] for m in methods]}")


def step7_payment_and_submit(sid: str) -> str:
    step("7. Payment, review, submit")
    state = GET(f"/api/wizard/sessions/{sid}")
    if not state["draft"]["payment_method_id"]:
        fail("No default payment method preselected")
    advance(sid, 5)
    set_fields(sid, {"terms_accepted": True})
    advance(sid, 5)
    review = GET(f"/api/wizard/sessions/{sid}/review")
    ok(f"Review: {review['budget']} → {review['estimated_reach']}")
    campaign = POST(f"/api/wizard/sessions/{sid}/finalize", {"mode": "submit"}, expect=201)
    if campaign["status"] != "pending-approval":
        fail(f"Unexpected status: {campaign['status']}")
    ok(f"Submitted {campaign['id']}")
    return campaign["id"]


def step8_listed(campaign_id: str):
    step("8. Campaign list")
    data = _req("GET", "/api/campaigns?status=pending-approval")
    ids = [c["id"] for c in data]
    if campaign_id not in ids:
        fail(f"{campaign_id} missing from pending campaigns")
    ok(f"{len(ids)} pending campaign(s), ours included")


def main():
    print(f"\n🔬 Smoke E2E Test — {BASE_URL}\n")

    try:
        step1_health()
        step2_login()
        sid = step3_start()
        step4_details(sid)
        step5_creative(sid)
        step6_budget(sid)
        campaign_id = step7_payment_and_submit(sid)
        step8_listed(campaign_id)
        print(f"\n  🎉 PASS ({SMOKE_TAG})\n")

    except SmokeError as e:
        print(f"\n{'='*60}")
        print(f"  ❌ FAIL: {e}")
        print(f"{'='*60}\n")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n\n  ⏹ Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
