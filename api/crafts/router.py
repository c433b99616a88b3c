"""
CRAFT participant endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter()


@router.get("/crafts")
async def list_crafts(
    _: dict = Depends(auth_dependencies.get_current_user),
) -> list[dict]:
    return await service.list_crafts()


@router.get("/crafts/participant/{participant_id}")
async def get_craft(
    participant_id: int,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.get_craft(participant_id)


@router.get("/crafts/user/{user_id}")
async def get_craft_by_user(
    user_id: int,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.get_craft_by_user(user_id)


@router.post("/crafts/register", status_code=status.HTTP_201_CREATED)
async def register(
    payload: schemas.CraftRegisterRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.register(payload, user_id=int(current_user["user_id"]))


@router.put("/crafts/verify/{participant_id}")
async def verify(
    participant_id: int,
    _: dict = Depends(auth_dependencies.get_admin_user),
) -> dict:
    return await service.verify(participant_id)


@router.put("/crafts/reject/{participant_id}")
async def reject(
    participant_id: int,
    payload: schemas.CraftRejectRequest,
    _: dict = Depends(auth_dependencies.get_admin_user),
) -> dict:
    return await service.reject(participant_id, payload)


@router.put("/crafts/edit/{participant_id}")
async def edit(
    participant_id: int,
    payload: schemas.CraftEditRequest,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.edit(participant_id, payload)


@router.delete("/crafts/delete/{participant_id}")
async def delete(
    participant_id: int,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.delete(participant_id)
