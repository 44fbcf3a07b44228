"""Profile schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from app.core.constants import MAX_LENGTHS
from app.core.validation import validate_optional_string, validate_url, validate_username


class ProfileUpdate(BaseModel):
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None

    @field_validator("username", mode="before")
    @classmethod
    def check_username(cls, v: Any) -> str:
        return validate_username(v)

    @field_validator("full_name", mode="before")
    @classmethod
    def check_full_name(cls, v: Any) -> str | None:
        return validate_optional_string(v, MAX_LENGTHS["full_name"])

    @field_validator("bio", mode="before")
    @classmethod
    def check_bio(cls, v: Any) -> str | None:
        return validate_optional_string(v, MAX_LENGTHS["bio"])

    @field_validator("avatar_url", mode="before")
    @classmethod
    def check_avatar_url(cls, v: Any) -> str | None:
        if v is None or v == "":
            return None
        return validate_url(v)


class ProfileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    created_at: datetime
    updated_at: datetime


class AccountRead(BaseModel):
    """Signed-in user with their profile."""

    id: UUID
    email: str
    created_at: datetime
    profile: ProfileRead | None = None
