"""
Participant export endpoints (`/cic-participant`, `/sbc-participant`, ...).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from registration.tracks import Track, get_track

from . import service

router = APIRouter()


@router.get("/{track}-participant")
async def list_participants(
    track: Track,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.list_participants(get_track(track))
