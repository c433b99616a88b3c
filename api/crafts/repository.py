"""
CRAFT participant persistence.
"""

from __future__ import annotations

from typing import Any

from core import db

CRAFT_EDITABLE = (
    "user_id",
    "full_name",
    "institution_name",
    "activity_choice",
    "whatsapp_number",
    "is_mahasiswa_dtsl",
    "ktm",
    "payment_proof",
    "email",
    "bukti_follow_cia",
    "bukti_follow_pktsl",
    "bukti_story",
    "bundling_member",
    "bundle",
)


def _pick(values: dict[str, Any]) -> dict[str, Any]:
    return {k: values[k] for k in CRAFT_EDITABLE if k in values}


async def list_crafts() -> list[dict[str, Any]]:
    return await db.fetch_all("SELECT * FROM craft ORDER BY participant_id")


async def get_craft(participant_id: int) -> dict[str, Any] | None:
    return await db.fetch_one("SELECT * FROM craft WHERE participant_id = $1", participant_id)


async def get_craft_by_user(user_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        SELECT *
        FROM craft
        WHERE user_id = $1
        ORDER BY participant_id DESC
        LIMIT 1
        """,
        user_id,
    )


async def insert_craft(values: dict[str, Any]) -> dict[str, Any]:
    data = _pick(values)
    columns = ", ".join(data.keys())
    placeholders = ", ".join(f"${i}" for i in range(1, len(data) + 1))
    row = await db.fetch_one(
        f"INSERT INTO craft ({columns}) VALUES ({placeholders}) RETURNING *",
        *data.values(),
    )
    if row is None:
        raise RuntimeError("Failed to insert craft participant.")
    return row


async def update_craft(participant_id: int, values: dict[str, Any]) -> dict[str, Any] | None:
    data = _pick(values)
    if not data:
        return await get_craft(participant_id)
    assignments = ", ".join(f"{column} = ${i}" for i, column in enumerate(data.keys(), start=2))
    return await db.fetch_one(
        f"UPDATE craft SET {assignments} WHERE participant_id = $1 RETURNING *",
        participant_id,
        *data.values(),
    )


async def mark_verified(participant_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        UPDATE craft
        SET status = 'verified'
        WHERE participant_id = $1
        RETURNING *
        """,
        participant_id,
    )


async def mark_rejected(participant_id: int, *, reject_message: str | None) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        UPDATE craft
        SET status = 'rejected',
            reject_message = $2
        WHERE participant_id = $1
        RETURNING *
        """,
        participant_id,
        reject_message,
    )


async def delete_craft(participant_id: int) -> bool:
    status_tag = await db.execute("DELETE FROM craft WHERE participant_id = $1", participant_id)
    return db.affected_rows(status_tag) > 0
