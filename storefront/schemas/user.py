"""User API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from storefront.models.user import Role
from storefront.schemas.base import CamelModel


# bcrypt only hashes the first 72 bytes and rejects anything longer.
MAX_PASSWORD_BYTES = 72


def _check_password_bytes(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
    return value


def _normalize_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if "@" not in value or value.startswith("@") or value.endswith("@"):
        raise ValueError("must be a valid email address")
    return value


class UserCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., max_length=320)
    password: str = Field(..., min_length=1, max_length=MAX_PASSWORD_BYTES)
    role: Role = Role.CUSTOMER
    image: Optional[str] = Field(default=None, max_length=1024)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: Optional[str]) -> Optional[str]:
        return _normalize_email(value)

    @field_validator("password")
    @classmethod
    def check_password(cls, value: Optional[str]) -> Optional[str]:
        return _check_password_bytes(value)


class UserRegister(CamelModel):
    """Self-service sign-up; the role is always CUSTOMER."""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., max_length=320)
    password: str = Field(..., min_length=1, max_length=MAX_PASSWORD_BYTES)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: Optional[str]) -> Optional[str]:
        return _normalize_email(value)

    @field_validator("password")
    @classmethod
    def check_password(cls, value: Optional[str]) -> Optional[str]:
        return _check_password_bytes(value)


class UserUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, max_length=320)
    password: Optional[str] = Field(default=None, max_length=MAX_PASSWORD_BYTES)
    role: Optional[Role] = None
    image: Optional[str] = Field(default=None, max_length=1024)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: Optional[str]) -> Optional[str]:
        return _normalize_email(value)

    @field_validator("password")
    @classmethod
    def check_password(cls, value: Optional[str]) -> Optional[str]:
        return _check_password_bytes(value)


class UserResponse(CamelModel):
    id: UUID
    name: str
    email: str
    role: Role
    image: Optional[str] = None
    created_at: datetime
