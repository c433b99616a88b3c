"""
User account endpoints.

Register and login are public; everything else needs a bearer token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from . import dependencies, schemas, service

router = APIRouter()


@router.post("/user/register", status_code=status.HTTP_201_CREATED)
async def register(payload: schemas.RegisterRequest) -> schemas.RegisterResponse:
    return await service.register(payload)


@router.post("/user/login")
async def login(payload: schemas.LoginRequest) -> schemas.LoginResponse:
    return await service.login(payload)


@router.get("/user")
async def list_users(
    _: dict = Depends(dependencies.get_current_user),
) -> list[schemas.UserResponse]:
    return await service.list_users()


@router.get("/user/{user_id}")
async def get_user(
    user_id: int,
    _: dict = Depends(dependencies.get_current_user),
) -> schemas.UserResponse:
    return await service.get_user(user_id)


@router.get("/user/{user_id}/events")
async def user_events(
    user_id: int,
    _: dict = Depends(dependencies.get_current_user),
) -> dict:
    return await service.user_events(user_id)
