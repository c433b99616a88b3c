"""
Request builders shared by the route tests.
"""

from __future__ import annotations

import json
from pathlib import Path

from fastapi.testclient import TestClient


def member(name: str, **extra) -> dict:
    return {
        "full_name": name,
        "department": "Civil Engineering",
        "batch": "2022",
        "phone_number": "0812",
        "line_id": name.lower() or None,
        "email": f"{name.lower()}@example.com" if name else "",
        **extra,
    }


def cic_payload(team_name: str = "Alpha", members: list[dict] | None = None) -> dict:
    return {
        "team": {"team_name": team_name, "institution_name": "X University", "email": "alpha@example.com"},
        "leader": member("Lead"),
        "members": members if members is not None else [member("Ana"), member("Budi"), member("")],
    }


def pdf(name: str = "doc.pdf") -> tuple[str, bytes, str]:
    return (name, b"%PDF-1.4 test", "application/pdf")


def post_team(client: TestClient, track: str, payload: dict, headers: dict, files: dict | None = None):
    return client.post(
        f"/api/teams/{track}/new",
        data={"data": json.dumps(payload)},
        files=files or {"payment_proof": pdf("proof.pdf")},
        headers=headers,
    )


def count_files(root: Path) -> int:
    if not root.exists():
        return 0
    return sum(1 for path in root.rglob("*") if path.is_file())
