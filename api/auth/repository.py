"""
User persistence helpers.
"""

from __future__ import annotations

from core import db

USER_COLUMNS = "user_id, username, email, is_admin, event_id, created_at"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_user(
    *,
    username: str,
    email: str,
    password_hash: str,
    is_admin: bool = False,
    event_id: int | None = None,
) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO users (username, email, password_hash, is_admin, event_id)
        VALUES ($1, $2, $3, $4, $5)
        RETURNING {USER_COLUMNS}
        """,
        username.strip(),
        normalize_email(email),
        password_hash,
        is_admin,
        event_id,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_by_login(login: str) -> dict | None:
    """
    Look a user up by username or (case-insensitive) email.
    """
    return await db.fetch_one(
        f"""
        SELECT {USER_COLUMNS}, password_hash
        FROM users
        WHERE username = $1
           OR lower(email) = lower($1)
        LIMIT 1
        """,
        (login or "").strip(),
    )


async def get_user_by_id(user_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        WHERE user_id = $1
        """,
        user_id,
    )


async def list_users() -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        ORDER BY user_id
        """
    )


async def list_user_events(user_id: int) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT t.team_id, t.event_id, t.team_name, t.status, e.event_name
        FROM teams t
        JOIN events e ON e.event_id = t.event_id
        WHERE t.user_id = $1
        ORDER BY t.team_id
        """,
        user_id,
    )
