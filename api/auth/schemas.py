"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)
    is_admin: bool = Field(default=False, validation_alias=AliasChoices("is_admin", "isAdmin"))
    event_id: int | None = Field(default=None, validation_alias=AliasChoices("event_id", "eventId"))


class LoginRequest(BaseModel):
    # Either the username or the email address.
    username: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(BaseModel):
    user_id: int
    username: str
    email: str
    is_admin: bool
    event_id: int | None = None
    created_at: datetime | None = None


class RegisterResponse(BaseModel):
    message: str
    user: UserResponse


class LoginResponse(BaseModel):
    message: str
    user: UserResponse
    token: str


class UserEvent(BaseModel):
    team_id: int
    event_id: int
    team_name: str
    event_name: str
    status: str
