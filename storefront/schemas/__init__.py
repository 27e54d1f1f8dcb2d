"""Pydantic schemas for API payloads."""

from storefront.schemas.audit import (
    AuditEvent,
    AuditLogFilter,
    AuditLogPage,
    AuditLogResponse,
    Pagination,
)
from storefront.schemas.auth import LoginRequest, MeResponse, Principal, TokenResponse
from storefront.schemas.product import ProductCreate, ProductResponse
from storefront.schemas.user import UserCreate, UserRegister, UserResponse, UserUpdate

__all__ = [
    "AuditEvent",
    "AuditLogFilter",
    "AuditLogPage",
    "AuditLogResponse",
    "LoginRequest",
    "MeResponse",
    "Pagination",
    "Principal",
    "ProductCreate",
    "ProductResponse",
    "TokenResponse",
    "UserCreate",
    "UserRegister",
    "UserResponse",
    "UserUpdate",
]
