# =========================================================
# FILE: /imagifine/schemas/contact.py
# =========================================================

from datetime import datetime
from typing import List

from pydantic import field_validator

from imagifine.models.contact import CONTACT_STATUSES
from imagifine.schemas.auth import clean_email
from imagifine.schemas.base import ApiModel


class ContactSubmitRequest(ApiModel):
    first_name: str
    last_name: str = ""
    email: str
    query: str

    @field_validator("first_name", "query")
    @classmethod
    def not_blank(cls, v: str):
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str):
        return clean_email(v)


class ContactItem(ApiModel):
    id: str
    first_name: str
    last_name: str
    email: str
    query: str
    status: str
    created_at: datetime
    updated_at: datetime


class ContactSubmitResponse(ApiModel):
    success: bool = True
    message: str
    id: str


class ContactListResponse(ApiModel):
    success: bool = True
    contacts: List[ContactItem]


class ContactStatusRequest(ApiModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str):
        v = (v or "").lower().strip()
        if v not in CONTACT_STATUSES:
            raise ValueError(f"status must be one of {list(CONTACT_STATUSES)}")
        return v


class ContactStatusResponse(ApiModel):
    success: bool = True
    contact: ContactItem
