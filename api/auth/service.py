"""
Auth business logic.
"""

from __future__ import annotations

import logging

import asyncpg

from core import errors

from . import repository, schemas, security

logger = logging.getLogger(__name__)


def _to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        user_id=int(user_row["user_id"]),
        username=str(user_row["username"]),
        email=str(user_row["email"]),
        is_admin=bool(user_row.get("is_admin", False)),
        event_id=user_row.get("event_id"),
        created_at=user_row.get("created_at"),
    )


async def register(payload: schemas.RegisterRequest) -> schemas.RegisterResponse:
    if not payload.username.strip() or not payload.email.strip() or not payload.password:
        raise errors.ValidationError("Username, email, and password are required")

    password_hash = security.hash_password(payload.password)
    try:
        user_row = await repository.create_user(
            username=payload.username,
            email=payload.email,
            password_hash=password_hash,
            is_admin=payload.is_admin,
            event_id=payload.event_id,
        )
    except asyncpg.UniqueViolationError as exc:
        raise errors.Conflict("Username or email already exists", status_code=409) from exc

    logger.info("Registered user %s", user_row["user_id"])
    return schemas.RegisterResponse(
        message="User created successfully",
        user=_to_user_response(user_row),
    )


async def login(payload: schemas.LoginRequest) -> schemas.LoginResponse:
    user_row = await repository.get_user_by_login(payload.username)
    if user_row is None:
        raise errors.NotFound("No user found with the provided username/email")

    if not security.verify_password(payload.password, str(user_row.get("password_hash") or "")):
        raise errors.Unauthenticated("Password is incorrect")

    token = security.build_access_token(
        user_id=int(user_row["user_id"]),
        is_admin=bool(user_row.get("is_admin", False)),
    )
    return schemas.LoginResponse(
        message="User logged in successfully",
        user=_to_user_response(user_row),
        token=token,
    )


async def list_users() -> list[schemas.UserResponse]:
    rows = await repository.list_users()
    if not rows:
        raise errors.NotFound("No users found")
    return [_to_user_response(row) for row in rows]


async def get_user(user_id: int) -> schemas.UserResponse:
    row = await repository.get_user_by_id(user_id)
    if row is None:
        raise errors.NotFound("No user found with the provided user_id")
    return _to_user_response(row)


async def user_events(user_id: int) -> dict:
    rows = await repository.list_user_events(user_id)
    if not rows:
        raise errors.NotFound("No events found for this user")
    return {
        "status": "success",
        "data": [schemas.UserEvent(**row) for row in rows],
    }
