"""
CRAFT participant business logic.
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg

from core import errors
from registration.service import status_view

from . import repository, schemas

logger = logging.getLogger(__name__)

NO_SUCH_USER = "No user found with the provided user_id"


async def list_crafts() -> list[dict[str, Any]]:
    return [status_view(row) for row in await repository.list_crafts()]


async def get_craft(participant_id: int) -> dict[str, Any]:
    row = await repository.get_craft(participant_id)
    if row is None:
        raise errors.NotFound("Craft participant not found")
    return status_view(row)


async def get_craft_by_user(user_id: int) -> dict[str, Any]:
    row = await repository.get_craft_by_user(user_id)
    if row is None:
        raise errors.NotFound("This account has no CRAFT registration")
    return status_view(row)


async def register(payload: schemas.CraftRegisterRequest, *, user_id: int) -> dict[str, Any]:
    values = payload.model_dump(exclude_none=True)
    values.setdefault("user_id", user_id)
    try:
        row = await repository.insert_craft(values)
    except asyncpg.ForeignKeyViolationError as exc:
        raise errors.NotFound(NO_SUCH_USER) from exc
    logger.info("Registered craft participant %s", row["participant_id"])
    return {"message": "Craft participant registered", "data": status_view(row)}


async def edit(participant_id: int, payload: schemas.CraftEditRequest) -> dict[str, Any]:
    try:
        row = await repository.update_craft(participant_id, payload.model_dump(exclude_unset=True))
    except asyncpg.ForeignKeyViolationError as exc:
        raise errors.NotFound(NO_SUCH_USER) from exc
    if row is None:
        raise errors.NotFound("Craft participant with this id was not found")
    return {"message": "Craft participant updated", "data": status_view(row)}


async def verify(participant_id: int) -> dict[str, Any]:
    row = await repository.mark_verified(participant_id)
    if row is None:
        raise errors.NotFound("Participant not found")
    logger.info("Craft participant %s verified", participant_id)
    return {"message": "Participant has been verified", "data": status_view(row)}


async def reject(participant_id: int, payload: schemas.CraftRejectRequest) -> dict[str, Any]:
    row = await repository.mark_rejected(participant_id, reject_message=payload.reject_message)
    if row is None:
        raise errors.NotFound("Participant not found")
    logger.info("Craft participant %s rejected", participant_id)
    return {"message": "Participant has been rejected", "data": status_view(row)}


async def delete(participant_id: int) -> dict[str, Any]:
    if not await repository.delete_craft(participant_id):
        raise errors.NotFound("Participant not found.")
    return {"message": "Participant has been deleted."}
