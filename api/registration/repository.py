"""
Registration persistence.
This module is where team/member/track-table SQL lives.

Write helpers take the transaction connection from `db.transaction()` as
their first argument; reads use the pool unless a connection is passed.
Table and column names only ever come from `tracks.py`, never from input.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db

from .tracks import ExtensionTable

TEAM_COLUMNS = (
    "team_id",
    "event_id",
    "user_id",
    "team_name",
    "institution_name",
    "email",
    "payment_proof",
    "voucher",
    "status",
    "reject_message",
    "created_at",
)

TEAM_EDITABLE = ("team_name", "institution_name", "email", "payment_proof", "voucher")

MEMBER_EDITABLE = (
    "full_name",
    "department",
    "batch",
    "nim",
    "semester",
    "phone_number",
    "line_id",
    "email",
    "ktm",
    "active_student_letter",
    "photo",
    "twibbon_and_poster_link",
)

_TEAM_SELECT = ", ".join(TEAM_COLUMNS)


def _pick(values: dict[str, Any], allowed: tuple[str, ...]) -> dict[str, Any]:
    return {k: values[k] for k in allowed if k in values}


async def team_name_exists(event_id: int, team_name: str) -> bool:
    row = await db.fetch_one(
        """
        SELECT 1 AS ok
        FROM teams
        WHERE event_id = $1
          AND team_name = $2
        LIMIT 1
        """,
        event_id,
        team_name,
    )
    return row is not None


async def insert_team(
    conn: asyncpg.Connection,
    *,
    event_id: int,
    user_id: int | None,
    values: dict[str, Any],
) -> int:
    row = await db.fetch_one(
        """
        INSERT INTO teams (event_id, user_id, team_name, institution_name, email, payment_proof, voucher)
        VALUES ($1, $2, $3, $4, $5, $6, $7)
        RETURNING team_id
        """,
        event_id,
        user_id,
        values["team_name"],
        values["institution_name"],
        values.get("email"),
        values.get("payment_proof"),
        values.get("voucher"),
        conn=conn,
    )
    if row is None or "team_id" not in row:
        raise RuntimeError("Failed to insert team.")
    return int(row["team_id"])


async def insert_member(
    conn: asyncpg.Connection,
    *,
    team_id: int,
    values: dict[str, Any],
    is_leader: bool,
) -> int:
    data = _pick(values, MEMBER_EDITABLE)
    columns = ["team_id", "is_leader", *data.keys()]
    placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
    row = await db.fetch_one(
        f"""
        INSERT INTO members ({", ".join(columns)})
        VALUES ({placeholders})
        RETURNING member_id
        """,
        team_id,
        is_leader,
        *data.values(),
        conn=conn,
    )
    if row is None:
        raise RuntimeError("Failed to insert member.")
    return int(row["member_id"])


async def insert_extension_row(
    conn: asyncpg.Connection,
    table: ExtensionTable,
    *,
    team_id: int,
    values: dict[str, Any],
) -> None:
    data = _pick(values, table.columns + table.file_columns)
    columns = ["team_id", *data.keys()]
    placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
    await db.execute(
        f"INSERT INTO {table.name} ({', '.join(columns)}) VALUES ({placeholders})",
        team_id,
        *data.values(),
        conn=conn,
    )


async def list_teams(event_id: int | None = None) -> list[dict[str, Any]]:
    """
    Teams of one event, or of every event when `event_id` is None.
    """
    return await db.fetch_all(
        f"""
        SELECT {_TEAM_SELECT}
        FROM teams
        WHERE ($1::int IS NULL OR event_id = $1)
        ORDER BY team_id
        """,
        event_id,
    )


async def get_team(
    team_id: int,
    *,
    event_id: int | None = None,
    conn: asyncpg.Connection | None = None,
) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {_TEAM_SELECT}
        FROM teams
        WHERE team_id = $1
          AND ($2::int IS NULL OR event_id = $2)
        """,
        team_id,
        event_id,
        conn=conn,
    )


async def list_members(team_ids: list[int]) -> list[dict[str, Any]]:
    """
    Members of the given teams, leader first within each team.
    """
    if not team_ids:
        return []
    return await db.fetch_all(
        """
        SELECT *
        FROM members
        WHERE team_id = ANY($1::bigint[])
        ORDER BY team_id, is_leader DESC, member_id
        """,
        team_ids,
    )


async def list_extension_rows(table: ExtensionTable, team_ids: list[int]) -> list[dict[str, Any]]:
    if not team_ids:
        return []
    return await db.fetch_all(
        f"""
        SELECT *
        FROM {table.name}
        WHERE team_id = ANY($1::bigint[])
        ORDER BY team_id, {table.key_column}
        """,
        team_ids,
    )


async def update_team(conn: asyncpg.Connection, *, team_id: int, values: dict[str, Any]) -> int:
    data = _pick(values, TEAM_EDITABLE)
    if not data:
        return 1
    assignments = ", ".join(f"{column} = ${i}" for i, column in enumerate(data.keys(), start=2))
    status_tag = await db.execute(
        f"UPDATE teams SET {assignments} WHERE team_id = $1",
        team_id,
        *data.values(),
        conn=conn,
    )
    return db.affected_rows(status_tag)


async def update_member(
    conn: asyncpg.Connection,
    *,
    team_id: int,
    member_id: int,
    is_leader: bool,
    values: dict[str, Any],
) -> int:
    """
    Update one member row; matches only when the row belongs to `team_id`
    and its leader flag equals `is_leader`.
    """
    data = _pick(values, MEMBER_EDITABLE)
    if not data:
        row = await db.fetch_one(
            "SELECT 1 AS ok FROM members WHERE member_id = $1 AND team_id = $2 AND is_leader = $3",
            member_id,
            team_id,
            is_leader,
            conn=conn,
        )
        return 1 if row else 0
    assignments = ", ".join(f"{column} = ${i}" for i, column in enumerate(data.keys(), start=4))
    status_tag = await db.execute(
        f"UPDATE members SET {assignments} WHERE member_id = $1 AND team_id = $2 AND is_leader = $3",
        member_id,
        team_id,
        is_leader,
        *data.values(),
        conn=conn,
    )
    return db.affected_rows(status_tag)


async def mark_verified(team_id: int, *, event_id: int | None = None) -> dict[str, Any] | None:
    """
    Move a team to `verified`. Any earlier rejection message is kept.
    """
    return await db.fetch_one(
        """
        UPDATE teams
        SET status = 'verified'
        WHERE team_id = $1
          AND ($2::int IS NULL OR event_id = $2)
        RETURNING team_id, event_id, status, reject_message
        """,
        team_id,
        event_id,
    )


async def mark_rejected(
    team_id: int,
    *,
    reject_message: str | None,
    event_id: int | None = None,
) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        UPDATE teams
        SET status = 'rejected',
            reject_message = $3
        WHERE team_id = $1
          AND ($2::int IS NULL OR event_id = $2)
        RETURNING team_id, event_id, status, reject_message
        """,
        team_id,
        event_id,
        reject_message,
    )


async def delete_extension_rows(conn: asyncpg.Connection, table: ExtensionTable, *, team_id: int) -> int:
    status_tag = await db.execute(f"DELETE FROM {table.name} WHERE team_id = $1", team_id, conn=conn)
    return db.affected_rows(status_tag)


async def delete_members(conn: asyncpg.Connection, *, team_id: int) -> int:
    status_tag = await db.execute("DELETE FROM members WHERE team_id = $1", team_id, conn=conn)
    return db.affected_rows(status_tag)


async def delete_team(conn: asyncpg.Connection, *, team_id: int) -> int:
    status_tag = await db.execute("DELETE FROM teams WHERE team_id = $1", team_id, conn=conn)
    return db.affected_rows(status_tag)
