"""Signup, login and password reset schemas."""

import re
from typing import Any

from pydantic import BaseModel, field_validator

from app.core.constants import MAX_LENGTHS
from app.core.validation import validate_email, validate_password, validate_string


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v: Any) -> str:
        return validate_email(v)

    @field_validator("password", mode="before")
    @classmethod
    def check_password(cls, v: Any) -> str:
        if not isinstance(v, str) or not v:
            raise ValueError("Password is required")
        if len(v) > MAX_LENGTHS["password"]:
            raise ValueError("Password is too long")
        return v


class SignupRequest(BaseModel):
    email: str
    password: str
    full_name: str

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v: Any) -> str:
        return validate_email(v)

    @field_validator("password", mode="before")
    @classmethod
    def check_password(cls, v: Any) -> str:
        """Signup requires length, mixed case and a digit; special characters only add strength."""
        if not isinstance(v, str) or not v:
            raise ValueError("Password is required")
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        if len(v) > MAX_LENGTHS["password"]:
            raise ValueError(f"Password must be at most {MAX_LENGTHS['password']} characters")
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", v):
            raise ValueError("Password must contain at least one lowercase letter")
        if not re.search(r"[0-9]", v):
            raise ValueError("Password must contain at least one number")
        return v

    @field_validator("full_name", mode="before")
    @classmethod
    def check_full_name(cls, v: Any) -> str:
        return validate_string(v, MAX_LENGTHS["full_name"])


class ForgotPasswordRequest(BaseModel):
    email: str

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v: Any) -> str:
        return validate_email(v)


class ResetPasswordRequest(BaseModel):
    token: str
    password: str

    @field_validator("token", mode="before")
    @classmethod
    def check_token(cls, v: Any) -> str:
        return validate_string(v, 128, sanitize=False)

    @field_validator("password", mode="before")
    @classmethod
    def check_password(cls, v: Any) -> str:
        result = validate_password(v)
        if not result.valid:
            raise ValueError(result.error)
        return v


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user_id: str
    email: str


class DeleteAccountRequest(BaseModel):
    password: str | None = None
