"""Authentication schemas and the request principal."""

from __future__ import annotations

from typing import Literal
from uuid import UUID

from pydantic import ConfigDict, Field

from storefront.models.user import Role
from storefront.schemas.base import CamelModel


class Principal(CamelModel):
    """The authenticated caller, resolved once per request."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    role: Role
    name: str
    email: str


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(CamelModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    user: Principal


class MeResponse(CamelModel):
    user: Principal
    dashboard: str
