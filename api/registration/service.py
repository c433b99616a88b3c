"""
Registration workflow (orchestration).

One generic flow serves every team track; `TrackConfig` supplies what
differs. Multi-row writes run inside `db.transaction()` and uploaded files
only land in their final directory when that transaction commits.
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from typing import Any

import asyncpg
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import FormData

from core import db, errors
from intake import service as intake_service

from . import repository, schemas
from .tracks import MEMBER_DOCUMENTS, TrackConfig

logger = logging.getLogger(__name__)

TEAM_NAME_EXISTS = "TEAM_NAME_EXISTS"


def status_view(row: dict[str, Any]) -> dict[str, Any]:
    """
    Row with a `status` column plus the boolean flags older clients read.
    """
    view = dict(row)
    status = str(view.get("status") or schemas.TeamStatus.PENDING.value)
    view["status"] = status
    view["is_verified"] = status == schemas.TeamStatus.VERIFIED.value
    view["is_rejected"] = status == schemas.TeamStatus.REJECTED.value
    return view


def split_members(rows: list[dict[str, Any]]) -> tuple[dict[str, Any] | None, list[dict[str, Any]]]:
    leader = next((row for row in rows if row.get("is_leader")), None)
    others = [row for row in rows if not row.get("is_leader")]
    return leader, others


async def _assemble(teams: list[dict[str, Any]], config: TrackConfig | None) -> list[dict[str, Any]]:
    team_ids = [int(team["team_id"]) for team in teams]

    members_by_team: dict[int, list[dict[str, Any]]] = defaultdict(list)
    for row in await repository.list_members(team_ids):
        members_by_team[int(row["team_id"])].append(row)

    extension_rows: dict[str, dict[int, list[dict[str, Any]]]] = {}
    for table in config.extensions if config else ():
        grouped: dict[int, list[dict[str, Any]]] = defaultdict(list)
        for row in await repository.list_extension_rows(table, team_ids):
            grouped[int(row["team_id"])].append(row)
        extension_rows[table.name] = grouped

    result = []
    for team in teams:
        team_id = int(team["team_id"])
        leader, others = split_members(members_by_team.get(team_id, []))
        entry: dict[str, Any] = {"team": status_view(team), "leader": leader, "members": others}
        for name, grouped in extension_rows.items():
            entry[name] = grouped.get(team_id, [])
        result.append(entry)
    return result


async def list_teams(config: TrackConfig) -> list[dict[str, Any]]:
    teams = await repository.list_teams(config.event_id)
    if not teams:
        raise errors.NotFound(f"No teams found for {config.label}")
    return await _assemble(teams, config)


async def list_all_teams() -> list[dict[str, Any]]:
    teams = await repository.list_teams(None)
    if not teams:
        raise errors.NotFound("No teams found")
    return await _assemble(teams, None)


async def get_team(config: TrackConfig, team_id: int) -> dict[str, Any]:
    team = await repository.get_team(team_id, event_id=config.event_id)
    if team is None:
        raise errors.NotFound("No team found for this id and event")

    (entry,) = await _assemble([team], config)
    if config.require_members_on_get and entry["leader"] is None and not entry["members"]:
        raise errors.NotFound("No members found for this team")
    return entry


def parse_payload(config: TrackConfig, raw: Any) -> schemas.RegistrationPayload:
    if not raw or not isinstance(raw, str):
        raise errors.ValidationError("Missing team data", error="DATA_MISSING")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise errors.ValidationError("Invalid JSON data format", error=str(exc)) from exc

    if not isinstance(data, dict) or not data.get("team") or not data.get("leader"):
        raise errors.ValidationError(
            "Missing required team or leader data",
            error="REQUIRED_FIELDS_MISSING",
        )

    try:
        return config.payload_model.model_validate(data)
    except PydanticValidationError as exc:
        raise errors.ValidationError(
            "Invalid team data",
            error=exc.errors(include_url=False, include_context=False),
        ) from exc


def active_members(config: TrackConfig, members: list[schemas.MemberIn]) -> list[tuple[int, schemas.MemberIn]]:
    """
    Return (position, member) pairs to insert; positions start at 1.

    Trailing entries with a blank name are placeholders from the form and
    are dropped. A blank name before a filled one is an error.
    """
    kept = list(members)
    while kept and kept[-1].is_blank:
        kept.pop()

    if len(kept) > config.max_members:
        raise errors.ValidationError(
            f"{config.label} teams allow at most {config.max_members} members besides the leader",
            error="TOO_MANY_MEMBERS",
        )
    for position, member in enumerate(kept, start=1):
        if member.is_blank:
            raise errors.ValidationError(f"Member {position} full_name is required", error="REQUIRED_FIELDS_MISSING")
    return list(enumerate(kept, start=1))


def _member_values(
    member: schemas.MemberIn,
    staged: intake_service.StagedUploads,
    prefix: str,
) -> dict[str, Any]:
    values = member.model_dump()
    for doc in MEMBER_DOCUMENTS:
        values[doc] = staged.path_for(f"{prefix}_{doc}")
    return values


async def create_team(config: TrackConfig, *, form: FormData, user_id: int | None) -> dict[str, Any]:
    payload = parse_payload(config, form.get("data"))
    members = active_members(config, payload.members)
    files = await intake_service.read_form_files(
        form,
        allowed_fields=config.file_fields(),
        policy=config.policy,
    )

    # Checked before anything is written so a duplicate leaves no files behind.
    if await repository.team_name_exists(config.event_id, payload.team.team_name):
        raise errors.Conflict("Team name already exists", error=TEAM_NAME_EXISTS)

    staged = intake_service.StagedUploads(config.policy)
    try:
        staged.add_all(files)
        async with db.transaction() as conn:
            team_values = payload.team.model_dump()
            for field in config.team_file_fields:
                team_values[field] = staged.path_for(field)
            team_id = await repository.insert_team(
                conn,
                event_id=config.event_id,
                user_id=user_id,
                values=team_values,
            )

            await repository.insert_member(
                conn,
                team_id=team_id,
                values=_member_values(payload.leader, staged, "leader"),
                is_leader=True,
            )
            for position, member in members:
                await repository.insert_member(
                    conn,
                    team_id=team_id,
                    values=_member_values(member, staged, f"member{position}"),
                    is_leader=False,
                )

            for table in config.extensions:
                for values in table.rows(payload, staged):
                    await repository.insert_extension_row(conn, table, team_id=team_id, values=values)

            staged.commit()
    except asyncpg.UniqueViolationError as exc:
        staged.discard()
        raise errors.Conflict("Team name already exists", error=TEAM_NAME_EXISTS) from exc
    except Exception:
        staged.discard()
        raise

    logger.info("Created %s team %s with %d member(s)", config.label, team_id, len(members) + 1)
    return {"message": "Team and members created successfully", "team_id": team_id}


async def update_team(config: TrackConfig | None, payload: schemas.UpdatePayload) -> dict[str, Any]:
    team_id = payload.team.team_id
    event_id = config.event_id if config else None
    try:
        async with db.transaction() as conn:
            team = await repository.get_team(team_id, event_id=event_id, conn=conn)
            if team is None:
                raise errors.NotFound("No team found for this id and event")

            await repository.update_team(
                conn,
                team_id=team_id,
                values=payload.team.model_dump(exclude_unset=True, exclude={"team_id"}),
            )
            slots = [(payload.leader, True)] + [(member, False) for member in payload.members]
            for member, is_leader in slots:
                updated = await repository.update_member(
                    conn,
                    team_id=team_id,
                    member_id=member.member_id,
                    is_leader=is_leader,
                    values=member.model_dump(exclude_unset=True, exclude={"member_id"}),
                )
                if not updated:
                    role = "Leader" if is_leader else "Member"
                    raise errors.NotFound(f"{role} {member.member_id} not found for this team")
    except asyncpg.UniqueViolationError as exc:
        raise errors.Conflict("Team name already exists", error=TEAM_NAME_EXISTS) from exc

    return {"message": "Team and members updated successfully"}


async def verify_team(team_id: int, config: TrackConfig | None = None) -> dict[str, Any]:
    row = await repository.mark_verified(team_id, event_id=config.event_id if config else None)
    if row is None:
        raise errors.NotFound("Team not found")
    logger.info("Team %s verified", team_id)
    return {"message": "Team has been verified", "team": status_view(row)}


async def reject_team(
    team_id: int,
    payload: schemas.RejectRequest,
    config: TrackConfig | None = None,
) -> dict[str, Any]:
    row = await repository.mark_rejected(
        team_id,
        reject_message=payload.reject_message,
        event_id=config.event_id if config else None,
    )
    if row is None:
        raise errors.NotFound("Team not found")
    logger.info("Team %s rejected", team_id)
    return {"message": "Team rejection status updated successfully", "team": status_view(row)}


async def delete_team(config: TrackConfig, team_id: int) -> dict[str, Any]:
    async with db.transaction() as conn:
        team = await repository.get_team(team_id, event_id=config.event_id, conn=conn)
        if team is None:
            raise errors.NotFound("No team found for this id and event")

        # Children before parent.
        for table in reversed(config.extensions):
            await repository.delete_extension_rows(conn, table, team_id=team_id)
        await repository.delete_members(conn, team_id=team_id)
        await repository.delete_team(conn, team_id=team_id)

    logger.info("Deleted %s team %s", config.label, team_id)
    return {"message": "Team and related data have been deleted."}
