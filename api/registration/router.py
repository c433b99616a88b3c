"""
Team registration endpoints.

Per-track routes live under `/teams/{track}`; the bare `/teams` routes act
on teams of any track.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from auth import dependencies as auth_dependencies

from . import schemas, service
from .tracks import Track, get_track

router = APIRouter()


@router.get("/teams")
async def list_all_teams(
    _: dict = Depends(auth_dependencies.get_current_user),
) -> list[dict]:
    return await service.list_all_teams()


@router.put("/teams/update")
async def update_any_team(
    payload: schemas.UpdatePayload,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.update_team(None, payload)


@router.put("/teams/{team_id}/verify")
async def verify_any_team(
    team_id: int,
    _: dict = Depends(auth_dependencies.get_admin_user),
) -> dict:
    return await service.verify_team(team_id)


@router.put("/teams/{team_id}/reject")
async def reject_any_team(
    team_id: int,
    payload: schemas.RejectRequest,
    _: dict = Depends(auth_dependencies.get_admin_user),
) -> dict:
    return await service.reject_team(team_id, payload)


@router.get("/teams/{track}")
async def list_teams(
    track: Track,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> list[dict]:
    return await service.list_teams(get_track(track))


@router.post("/teams/{track}/new", status_code=status.HTTP_201_CREATED)
async def create_team(
    track: Track,
    request: Request,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    """
    Multipart create: a JSON `data` part plus the track's file fields.
    """
    async with request.form() as form:
        return await service.create_team(
            get_track(track),
            form=form,
            user_id=int(current_user["user_id"]),
        )


@router.put("/teams/{track}/update")
async def update_team(
    track: Track,
    payload: schemas.UpdatePayload,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.update_team(get_track(track), payload)


@router.delete("/teams/{track}/delete/{team_id}")
async def delete_team(
    track: Track,
    team_id: int,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.delete_team(get_track(track), team_id)


@router.get("/teams/{track}/{team_id}")
async def get_team(
    track: Track,
    team_id: int,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.get_team(get_track(track), team_id)


@router.put("/teams/{track}/{team_id}/verify")
async def verify_team(
    track: Track,
    team_id: int,
    _: dict = Depends(auth_dependencies.get_admin_user),
) -> dict:
    return await service.verify_team(team_id, get_track(track))


@router.put("/teams/{track}/{team_id}/reject")
async def reject_team(
    track: Track,
    team_id: int,
    payload: schemas.RejectRequest,
    _: dict = Depends(auth_dependencies.get_admin_user),
) -> dict:
    return await service.reject_team(team_id, payload, get_track(track))
