"""
Standalone file upload endpoint.

Returns a path reference clients can put into JSON payloads (e.g. CRAFT).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile

from auth import dependencies as auth_dependencies

from . import service

router = APIRouter()


@router.post("/upload")
async def upload_file(
    file: UploadFile = File(...),
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    path = await service.store_single(file)
    return {
        "message": "File uploaded successfully",
        "filePath": f"/{path.lstrip('/')}",
    }
