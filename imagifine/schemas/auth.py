# =========================================================
# FILE: /imagifine/schemas/auth.py
# =========================================================

import re
from datetime import datetime
from typing import Optional

from pydantic import field_validator

from imagifine.schemas.base import ApiModel

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def clean_email(v: str) -> str:
    v = (v or "").strip().lower()
    if not _EMAIL_RE.match(v):
        raise ValueError("Invalid email address")
    return v


class RegisterRequest(ApiModel):
    username: str
    email: str
    password: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str):
        v = (v or "").strip()
        if not v:
            raise ValueError("Username is required")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str):
        return clean_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str):
        if not v:
            raise ValueError("Password is required")
        return v


class VerifyOtpRequest(ApiModel):
    user_id: str
    otp: str

    @field_validator("otp")
    @classmethod
    def strip_otp(cls, v: str):
        return (v or "").strip()


class ResendOtpRequest(ApiModel):
    user_id: str


class LoginRequest(ApiModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str):
        return (v or "").strip().lower()


class UserPublic(ApiModel):
    id: str
    username: str
    email: str
    credits: int


class UserDetail(UserPublic):
    is_verified: bool
    role: str
    created_at: datetime


class RegisterResponse(ApiModel):
    message: str
    user_id: str


class TokenResponse(ApiModel):
    message: Optional[str] = None
    token: str
    user: UserPublic


class MessageResponse(ApiModel):
    message: str
