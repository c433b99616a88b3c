"""
File intake "service layer".

This file contains logic that is independent of FastAPI's routing layer:
- Validate uploads against a per-track policy (extension / content type)
- Read file bytes with a size limit
- Stage accepted files and move them into place once the DB write commits

Nothing reaches the destination directory unless `StagedUploads.commit()`
runs; `discard()` removes whatever was written for the request.
"""

from __future__ import annotations

import logging
import mimetypes
import random
import shutil
import time
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from starlette.datastructures import FormData, UploadFile

from core import errors, settings

MB = 1024 * 1024
STAGING_DIRNAME = ".staging"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadPolicy:
    subdir: str
    max_bytes: int
    allowed_extensions: frozenset[str] = frozenset()
    # Exact types, or prefixes ending in "/" such as "image/".
    allowed_content_types: frozenset[str] = frozenset()
    rejection_message: str = "File type not allowed"

    def accepts(self, ext: str, content_type: str | None) -> bool:
        if not self.allowed_extensions and not self.allowed_content_types:
            return True
        if ext in self.allowed_extensions:
            return True
        ctype = (content_type or "").split(";", 1)[0].strip().lower()
        if not ctype:
            return False
        for allowed in self.allowed_content_types:
            if allowed.endswith("/") and ctype.startswith(allowed):
                return True
            if ctype == allowed:
                return True
        return False


DOCUMENT_EXTENSIONS = frozenset({".jpeg", ".jpg", ".png", ".pdf"})

GENERAL_POLICY = UploadPolicy(
    subdir="general",
    max_bytes=10 * MB,
    allowed_extensions=DOCUMENT_EXTENSIONS,
    rejection_message="Only .jpeg, .jpg, .png and .pdf format allowed!",
)


@dataclass(frozen=True)
class IncomingFile:
    field: str
    ext: str
    content_type: str | None
    data: bytes


def _file_ext(filename: str) -> str:
    return Path(filename).suffix.lower()


def validate_upload(file: UploadFile, policy: UploadPolicy) -> str:
    """
    Return the normalized file extension if this upload is acceptable.

    The client filename is only consulted for its extension.
    """
    if not file.filename:
        raise errors.ValidationError("Missing filename.")

    ext = _file_ext(file.filename)
    if not policy.accepts(ext, file.content_type):
        raise errors.ValidationError(policy.rejection_message, error="FILE_TYPE_NOT_ALLOWED")

    if not ext and file.content_type:
        ext = mimetypes.guess_extension(file.content_type.split(";", 1)[0].strip()) or ""
    return ext


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read the upload into memory, enforcing a maximum size.
    """
    chunk_size = 1024 * 1024  # 1 MiB
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise errors.ValidationError(
                f"File too large. Max is {max_bytes} bytes.",
                error="FILE_TOO_LARGE",
            )

    return bytes(buf)


async def read_form_files(
    form: FormData,
    *,
    allowed_fields: Iterable[str],
    policy: UploadPolicy,
) -> dict[str, IncomingFile]:
    """
    Validate and buffer every file part of a multipart form.

    Fails before anything touches the disk when a field is unexpected,
    repeated, of a disallowed type, or too large.
    """
    allowed = set(allowed_fields)
    files: dict[str, IncomingFile] = {}

    for field, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        # Browsers send empty parts for untouched file inputs.
        if not value.filename:
            continue
        if field not in allowed:
            raise errors.ValidationError(f"Unexpected file field '{field}'", error="UNEXPECTED_FIELD")
        if field in files:
            raise errors.ValidationError(f"Only one file is allowed for '{field}'", error="UNEXPECTED_FIELD")

        ext = validate_upload(value, policy)
        data = await read_upload_bytes(value, max_bytes=policy.max_bytes)
        files[field] = IncomingFile(field=field, ext=ext, content_type=value.content_type, data=data)

    return files


def generated_filename(field: str, ext: str) -> str:
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{field}-{unique_suffix}{ext}"


class StagedUploads:
    """
    Files accepted for one request, parked under `<root>/.staging/<uuid>/`.

    `path_for()` already returns the final reference so it can be written to
    the database before the files are moved.
    """

    def __init__(self, policy: UploadPolicy, *, root: str | Path | None = None) -> None:
        self.root = Path(root if root is not None else settings.upload_root())
        self.destination = self.root / policy.subdir
        self.staging_dir = self.root / STAGING_DIRNAME / uuid.uuid4().hex
        self._pending: dict[str, tuple[Path, Path]] = {}
        self._moved: list[Path] = []

    def add(self, incoming: IncomingFile) -> str:
        self.staging_dir.mkdir(parents=True, exist_ok=True)
        name = generated_filename(incoming.field, incoming.ext)
        staged = self.staging_dir / name
        staged.write_bytes(incoming.data)
        final = self.destination / name
        self._pending[incoming.field] = (staged, final)
        return final.as_posix()

    def add_all(self, files: dict[str, IncomingFile]) -> None:
        for incoming in files.values():
            self.add(incoming)

    def path_for(self, field: str) -> str | None:
        entry = self._pending.get(field)
        return entry[1].as_posix() if entry else None

    def paths(self, fields: Iterable[str]) -> dict[str, str | None]:
        return {field: self.path_for(field) for field in fields}

    def __len__(self) -> int:
        return len(self._pending)

    def commit(self) -> None:
        if not self._pending:
            return None
        self.destination.mkdir(parents=True, exist_ok=True)
        for staged, final in self._pending.values():
            shutil.move(str(staged), str(final))
            self._moved.append(final)
        self._remove_staging_dir()

    def discard(self) -> None:
        """
        Best-effort removal of everything written for this request.
        """
        for path in self._moved:
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.exception("Failed to delete uploaded file %s", path)
        self._moved.clear()
        self._remove_staging_dir()
        self._pending.clear()

    def _remove_staging_dir(self) -> None:
        if not self.staging_dir.exists():
            return None
        try:
            shutil.rmtree(self.staging_dir)
        except OSError:
            logger.exception("Failed to remove staging directory %s", self.staging_dir)


async def store_single(file: UploadFile, *, field: str = "file", policy: UploadPolicy = GENERAL_POLICY) -> str:
    """
    Validate and store one file outside any database write.
    """
    ext = validate_upload(file, policy)
    data = await read_upload_bytes(file, max_bytes=policy.max_bytes)
    staged = StagedUploads(policy)
    path = staged.add(IncomingFile(field=field, ext=ext, content_type=file.content_type, data=data))
    try:
        staged.commit()
    except OSError:
        staged.discard()
        raise
    return path
