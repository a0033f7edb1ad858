#!/usr/bin/env python3
"""Moderation walkthrough for EventGate: submit, approve, report, remove."""

from __future__ import annotations

import os
import sys
import time
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
from jose import jwt


def _env(name: str, default: str | None = None) -> str | None:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return value


def _mint_token(secret: str, algorithm: str, subject: str, email: str, name: str) -> str:
    """Stand-in for the identity provider when running against a local server."""
    claims = {
        "sub": subject,
        "email": email,
        "name": name,
        "exp": int(time.time()) + 3600,
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


class HttpClient:
    def __init__(self, base_url: str, token: str | None = None) -> None:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.client = httpx.Client(base_url=base_url.rstrip("/"), headers=headers, timeout=10.0)

    def request_json(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
        query: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        if query:
            query = {k: v for k, v in query.items() if v is not None}
        response = self.client.request(method, path, json=payload, params=query)
        if response.is_error:
            raise RuntimeError(
                f"{method} {path} failed: {response.status_code}: {response.text}"
            )
        if not response.content:
            return {}
        return response.json()


def main() -> int:
    base_url = _env("EVENTGATE_URL", "http://localhost:8080")
    secret = _env("EVENTGATE_JWT_SECRET")
    algorithm = _env("EVENTGATE_JWT_ALGORITHM", "HS256")
    user_token = _env("EVENTGATE_USER_TOKEN")
    moderator_token = _env("EVENTGATE_MODERATOR_TOKEN")
    moderator_email = _env("EVENTGATE_WALKTHROUGH_MODERATOR_EMAIL", "moderator@example.org")

    if secret:
        user_token = user_token or _mint_token(
            secret, algorithm, "walkthrough-user", "walkthrough-user@example.org", "Walkthrough User"
        )
        moderator_token = moderator_token or _mint_token(
            secret, algorithm, "walkthrough-moderator", moderator_email, "Walkthrough Moderator"
        )
    if not user_token or not moderator_token:
        raise RuntimeError(
            "Set EVENTGATE_JWT_SECRET, or EVENTGATE_USER_TOKEN and EVENTGATE_MODERATOR_TOKEN"
        )

    anonymous = HttpClient(base_url)
    user = HttpClient(base_url, user_token)
    moderator = HttpClient(base_url, moderator_token)

    print("Checking health...")
    health = anonymous.request_json("GET", "/v1/health")
    if health.get("status") != "healthy":
        raise RuntimeError(f"Unexpected health response: {health}")

    role = moderator.request_json("GET", "/v1/me").get("role")
    if role != "moderator":
        raise RuntimeError(
            f"{moderator_email} is not a moderator; add it to EVENTGATE_MODERATOR_EMAILS"
        )

    print("Submitting event...")
    event_date = datetime.now(timezone.utc) + timedelta(days=7)
    event = user.request_json(
        "POST",
        "/v1/events",
        payload={
            "title": "Walkthrough Rally",
            "description": "Demo event created by the moderation walkthrough.",
            "date": event_date.isoformat(),
            "city": "Lisbon",
            "country": "Portugal",
            "category": "protest",
            "source_url": "https://example.org/walkthrough-rally",
        },
    )
    event_id = event["id"]
    print(f"Event submitted: {event_id} ({event['status']})")

    public_ids = {e["id"] for e in anonymous.request_json("GET", "/v1/events")["events"]}
    if event_id in public_ids:
        raise RuntimeError("Pending event leaked into the public feed")

    print("Approving event...")
    moderator.request_json(
        "POST", f"/v1/moderation/events/{event_id}/approve", payload={"verified": True}
    )

    public = anonymous.request_json("GET", "/v1/events", query={"search": "walkthrough"})
    if event_id not in {e["id"] for e in public["events"]}:
        raise RuntimeError("Approved event missing from the public feed")

    print("Filing reports...")
    for reason in ("spam", "wrong_info"):
        user.request_json("POST", f"/v1/events/{event_id}/reports", payload={"reason": reason})

    reported = moderator.request_json("GET", "/v1/moderation/reported")["reported"]
    if event_id not in {r["event"]["id"] for r in reported}:
        raise RuntimeError("Reported event missing from the moderation queue")

    print("Removing event...")
    outcome = moderator.request_json(
        "POST", f"/v1/moderation/events/{event_id}/remove", payload={"reason": "spam"}
    )
    print(f"Reports cleared: {outcome['reports_deleted']}")
    if outcome["orphaned_report_ids"]:
        print(f"Orphaned reports to reconcile: {outcome['orphaned_report_ids']}")

    print("Transparency log:")
    for entry in moderator.request_json("GET", "/v1/transparency-log")["entries"]:
        print(f"  {entry['created_at']}  {entry['action']:8}  {entry['event_id']}  {entry['reason']}")

    print("Walkthrough complete: submitted, approved, reported, removed and logged.")
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except Exception as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        raise
