"""
Competition track definitions.

Every team track shares the team/leader/member shape; a `TrackConfig` only
names what differs: the event id, the upload policy, which file fields the
create form accepts, and the track-specific tables written alongside the
team.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from core import errors
from intake.service import DOCUMENT_EXTENSIONS, MB, StagedUploads, UploadPolicy

from . import schemas

MEMBER_DOCUMENTS = ("ktm", "active_student_letter", "photo")


class Track(str, Enum):
    CIC = "cic"
    SBC = "sbc"
    FCEC = "fcec"


@dataclass(frozen=True)
class ExtensionTable:
    """
    A track table keyed by `team_id`.

    `columns` come from the payload sub-object named `payload_key`;
    `file_columns` are filled from uploads. For one-to-many tables the
    upload field of row i (0-based) is `{prefix}{i+1 if i else ''}_{column}`.
    """

    name: str
    key_column: str
    payload_key: str
    columns: tuple[str, ...]
    file_columns: tuple[str, ...] = ()
    file_field_prefix: str | None = None
    max_rows: int = 1

    @property
    def many(self) -> bool:
        return self.max_rows > 1

    def file_field(self, column: str, index: int = 0) -> str:
        if self.file_field_prefix is None:
            return column
        number = str(index + 1) if index else ""
        return f"{self.file_field_prefix}{number}_{column}"

    def file_fields(self) -> list[str]:
        return [self.file_field(column, i) for i in range(self.max_rows) for column in self.file_columns]

    def rows(self, payload: schemas.RegistrationPayload, staged: StagedUploads) -> list[dict[str, Any]]:
        value = getattr(payload, self.payload_key)
        items = list(value) if isinstance(value, list) else [value]
        rows = []
        for index, item in enumerate(items):
            row = item.model_dump(include=set(self.columns))
            for column in self.file_columns:
                row[column] = staged.path_for(self.file_field(column, index))
            rows.append(row)
        return rows


@dataclass(frozen=True)
class TrackConfig:
    track: Track
    event_id: int
    label: str
    policy: UploadPolicy
    payload_model: type[schemas.RegistrationPayload]
    max_members: int
    team_file_fields: tuple[str, ...] = ("payment_proof", "voucher")
    extensions: tuple[ExtensionTable, ...] = field(default_factory=tuple)
    # Some tracks treat a team without members as missing.
    require_members_on_get: bool = False

    def member_file_fields(self) -> list[str]:
        prefixes = ["leader"] + [f"member{i}" for i in range(1, self.max_members + 1)]
        return [f"{prefix}_{doc}" for prefix in prefixes for doc in MEMBER_DOCUMENTS]

    def file_fields(self) -> list[str]:
        fields = list(self.team_file_fields) + self.member_file_fields()
        for table in self.extensions:
            fields.extend(table.file_fields())
        return fields

    def extension_file_columns(self) -> set[str]:
        return {column for table in self.extensions for column in table.file_columns}


TRACKS: dict[Track, TrackConfig] = {
    Track.CIC: TrackConfig(
        track=Track.CIC,
        event_id=4,
        label="CIC",
        policy=UploadPolicy(
            subdir="cic",
            max_bytes=10 * MB,
            allowed_extensions=DOCUMENT_EXTENSIONS,
            rejection_message="Only .jpeg, .jpg, .png and .pdf format allowed!",
        ),
        payload_model=schemas.CicRegistration,
        max_members=3,
        require_members_on_get=True,
    ),
    Track.SBC: TrackConfig(
        track=Track.SBC,
        event_id=3,
        label="SBC",
        policy=UploadPolicy(
            subdir="sbc",
            max_bytes=5 * MB,
            allowed_content_types=frozenset({"image/", "application/pdf"}),
            rejection_message="Only images and PDF files are allowed!",
        ),
        payload_model=schemas.SbcRegistration,
        max_members=2,
        extensions=(
            ExtensionTable(
                name="sbc",
                key_column="team_id",
                payload_key="sbc",
                columns=("bridge_name",),
            ),
            ExtensionTable(
                name="dosbim",
                key_column="advisor_id",
                payload_key="dosbim",
                columns=("full_name", "nip", "email", "phone_number"),
                file_columns=("photo",),
                file_field_prefix="dosbim",
                max_rows=2,
            ),
        ),
    ),
    Track.FCEC: TrackConfig(
        track=Track.FCEC,
        event_id=1,
        label="FCEC",
        policy=UploadPolicy(
            subdir="fcec",
            max_bytes=10 * MB,
            allowed_extensions=DOCUMENT_EXTENSIONS,
            rejection_message="Only .jpeg, .jpg, .png and .pdf format allowed!",
        ),
        payload_model=schemas.FcecRegistration,
        max_members=2,
        team_file_fields=("payment_proof",),
        extensions=(
            ExtensionTable(
                name="fcec",
                key_column="team_id",
                payload_key="fcec",
                columns=("abstract_title", "abstract_video_link"),
                file_columns=("abstract_file", "originality_statement"),
            ),
        ),
    ),
}


def get_track(track: Track | str) -> TrackConfig:
    try:
        return TRACKS[Track(track)]
    except ValueError as exc:
        raise errors.NotFound(f"Unknown track '{track}'") from exc
