"""
CRAFT participant schemas.

CRAFT registers individuals, not teams; document fields hold path
references returned by `POST /upload`.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class CraftFields(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True, str_strip_whitespace=True)

    full_name: str | None = Field(default=None, min_length=1, max_length=200)
    institution_name: str | None = Field(default=None, max_length=300)
    activity_choice: str | None = None
    whatsapp_number: str | None = None
    is_mahasiswa_dtsl: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("is_mahasiswa_dtsl", "isMahasiswaDTSL"),
    )
    ktm: str | None = None
    payment_proof: str | None = None
    email: str | None = None
    bukti_follow_cia: str | None = None
    bukti_follow_pktsl: str | None = None
    bukti_story: str | None = None
    bundling_member: str | None = None
    bundle: str | None = None

    @field_validator("full_name")
    @classmethod
    def _name_not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class CraftRegisterRequest(CraftFields):
    full_name: str = Field(..., min_length=1, max_length=200)
    # Defaults to the caller's own account.
    user_id: int | None = None


class CraftEditRequest(CraftFields):
    user_id: int | None = None


class CraftRejectRequest(BaseModel):
    reject_message: str | None = Field(
        default=None,
        max_length=2000,
        validation_alias=AliasChoices("reject_message", "rejectMessage"),
    )
