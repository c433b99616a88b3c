"""
Registration payload schemas.

Team-track creates arrive as multipart with a JSON `data` part; the models
below validate that JSON. Each track subclasses `RegistrationPayload` with
its own sub-objects.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class TeamStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True, str_strip_whitespace=True)


def _unwrap_single(value: Any) -> Any:
    # Older clients send one-element lists for one-to-one sub-objects.
    if isinstance(value, list) and len(value) == 1:
        return value[0]
    return value


class TeamIn(_Payload):
    team_name: str = Field(..., min_length=1, max_length=200)
    institution_name: str = Field(..., min_length=1, max_length=300)
    email: str | None = Field(default=None, max_length=320)


class MemberIn(_Payload):
    full_name: str = Field(default="", max_length=200)
    department: str | None = None
    batch: str | None = None
    nim: str | None = None
    semester: str | None = None
    phone_number: str | None = None
    line_id: str | None = None
    email: str | None = None
    twibbon_and_poster_link: str | None = None

    @property
    def is_blank(self) -> bool:
        return not self.full_name


class LeaderIn(MemberIn):
    full_name: str = Field(..., min_length=1, max_length=200)


class RegistrationPayload(_Payload):
    team: TeamIn
    leader: LeaderIn
    members: list[MemberIn] = Field(default_factory=list)


class CicRegistration(RegistrationPayload):
    pass


class SbcDetails(_Payload):
    bridge_name: str = Field(..., min_length=1, max_length=200)


class AdvisorIn(_Payload):
    full_name: str = Field(..., min_length=1, max_length=200)
    nip: str | None = None
    email: str | None = None
    phone_number: str | None = None


class SbcRegistration(RegistrationPayload):
    sbc: SbcDetails
    dosbim: list[AdvisorIn] = Field(..., min_length=1, max_length=2)

    @field_validator("sbc", mode="before")
    @classmethod
    def _single_sbc(cls, value: Any) -> Any:
        return _unwrap_single(value)

    @field_validator("dosbim", mode="before")
    @classmethod
    def _advisor_list(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return [value]
        return value


class FcecDetails(_Payload):
    abstract_title: str = Field(..., min_length=1, max_length=300)
    abstract_video_link: str | None = None


class FcecRegistration(RegistrationPayload):
    fcec: FcecDetails

    @field_validator("fcec", mode="before")
    @classmethod
    def _single_fcec(cls, value: Any) -> Any:
        return _unwrap_single(value)


def _not_null(value: Any) -> Any:
    # Omit a field to leave it unchanged; null would clear a required column.
    if value is None:
        raise ValueError("may be omitted but not null")
    return value


class TeamUpdate(_Payload):
    team_id: int
    team_name: str | None = Field(default=None, min_length=1, max_length=200)
    institution_name: str | None = Field(default=None, min_length=1, max_length=300)
    email: str | None = None
    payment_proof: str | None = None
    voucher: str | None = None

    @field_validator("team_name", "institution_name")
    @classmethod
    def _required_columns(cls, value: Any) -> Any:
        return _not_null(value)


class MemberUpdate(MemberIn):
    member_id: int
    full_name: str | None = Field(default=None, min_length=1, max_length=200)
    ktm: str | None = None
    active_student_letter: str | None = None
    photo: str | None = None

    @field_validator("full_name")
    @classmethod
    def _required_name(cls, value: Any) -> Any:
        return _not_null(value)


class UpdatePayload(_Payload):
    team: TeamUpdate
    leader: MemberUpdate
    members: list[MemberUpdate] = Field(default_factory=list)


class RejectRequest(_Payload):
    reject_message: str | None = Field(
        default=None,
        max_length=2000,
        validation_alias=AliasChoices("reject_message", "rejectMessage"),
    )
