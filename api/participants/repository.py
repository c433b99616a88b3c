"""
Participant export queries.

One row per member, joined with its team and the track's one-to-one
tables. One-to-many tables (advisors) are fetched per event and attached
by the service.
"""

from __future__ import annotations

from typing import Any

from core import db
from registration.tracks import ExtensionTable, TrackConfig

MEMBER_SELECT = """
  m.member_id,
  m.full_name,
  m.department,
  m.batch,
  m.nim,
  m.semester,
  m.phone_number,
  m.line_id,
  m.email,
  m.is_leader,
  m.twibbon_and_poster_link,
  m.ktm,
  m.active_student_letter,
  m.photo,
  t.team_id,
  t.team_name,
  t.institution_name,
  t.email AS team_email,
  t.status,
  t.reject_message
"""


def participants_sql(config: TrackConfig) -> str:
    single = [table for table in config.extensions if not table.many]
    team_files = "".join(f",\n  t.{column}" for column in config.team_file_fields)
    extra_columns = "".join(
        f",\n  {table.name}.{column}" for table in single for column in table.columns + table.file_columns
    )
    joins = "".join(f"\nJOIN {table.name} ON {table.name}.team_id = t.team_id" for table in single)
    return f"""
SELECT{MEMBER_SELECT}{team_files}{extra_columns}
FROM teams t
JOIN members m ON m.team_id = t.team_id{joins}
WHERE t.event_id = $1
ORDER BY t.team_id, m.is_leader DESC, m.member_id
"""


async def list_participants(config: TrackConfig) -> list[dict[str, Any]]:
    return await db.fetch_all(participants_sql(config), config.event_id)


async def list_event_rows(table: ExtensionTable, event_id: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT x.*
        FROM {table.name} x
        JOIN teams t ON t.team_id = x.team_id
        WHERE t.event_id = $1
        ORDER BY x.team_id, x.{table.key_column}
        """,
        event_id,
    )
