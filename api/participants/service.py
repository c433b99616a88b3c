"""
Participant export shaping.

Each joined row is split into `data` (plain fields) and `download` (file
references) so a presentation layer can render links separately.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any

from core import errors
from registration.service import status_view
from registration.tracks import MEMBER_DOCUMENTS, TrackConfig

from . import repository


def download_columns(config: TrackConfig) -> tuple[str, ...]:
    single_file_columns = tuple(
        column for table in config.extensions if not table.many for column in table.file_columns
    )
    return MEMBER_DOCUMENTS + config.team_file_fields + single_file_columns


def shape_participant(
    row: dict[str, Any],
    config: TrackConfig,
    related: dict[str, list[dict[str, Any]]] | None = None,
) -> dict[str, Any]:
    file_columns = download_columns(config)
    data = status_view({k: v for k, v in row.items() if k not in file_columns})
    download = {column: row.get(column) for column in file_columns}

    for table in config.extensions:
        if not table.many:
            continue
        rows = (related or {}).get(table.name, [])
        data[table.name] = [
            {k: v for k, v in item.items() if k not in table.file_columns} for item in rows
        ]
        for column in table.file_columns:
            download[f"{table.name}_{column}"] = [item.get(column) for item in rows]

    return {"data": data, "download": download}


async def list_participants(config: TrackConfig) -> dict[str, Any]:
    rows = await repository.list_participants(config)
    if not rows:
        raise errors.NotFound("No participants found")

    related: dict[str, dict[int, list[dict[str, Any]]]] = {}
    for table in config.extensions:
        if not table.many:
            continue
        grouped: dict[int, list[dict[str, Any]]] = defaultdict(list)
        for item in await repository.list_event_rows(table, config.event_id):
            grouped[int(item["team_id"])].append(item)
        related[table.name] = grouped

    participants = []
    for row in rows:
        team_id = int(row["team_id"])
        per_team = {name: grouped.get(team_id, []) for name, grouped in related.items()}
        participants.append(shape_participant(row, config, per_team))

    return {"status": "success", "participants": participants}
