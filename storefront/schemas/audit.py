"""Audit event and audit log query schemas."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from storefront.models.audit_log import ActionType
from storefront.models.product import ProductStatus
from storefront.models.user import Role
from storefront.schemas.base import CamelModel


class AuditEvent(BaseModel):
    """One action to be written to the audit trail."""

    action_type: ActionType
    entity_type: str = Field(..., max_length=64)
    entity_id: str = Field(..., max_length=64)
    description: str
    data: Optional[Any] = None
    user_id: Optional[UUID] = None
    product_id: Optional[int] = None
    user_entity_id: Optional[UUID] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def _enforce_timezone(self) -> "AuditEvent":
        if self.timestamp.tzinfo is None:
            self.timestamp = self.timestamp.replace(tzinfo=timezone.utc)
        else:
            self.timestamp = self.timestamp.astimezone(timezone.utc)
        return self


class AuditLogFilter(CamelModel):
    entity_type: Optional[str] = None
    action_type: Optional[ActionType] = None


class UserSummary(CamelModel):
    id: UUID
    name: str
    email: str
    role: Role


class ProductSummary(CamelModel):
    id: int
    name: str
    price: float
    status: ProductStatus


class AuditLogResponse(CamelModel):
    id: UUID
    timestamp: datetime
    action_type: ActionType
    entity_type: str
    entity_id: str
    description: str
    data: Optional[Any] = None
    user_id: Optional[UUID] = None
    user_entity_id: Optional[UUID] = None
    product_id: Optional[int] = None
    user: Optional[UserSummary] = None
    user_entity: Optional[UserSummary] = None
    product: Optional[ProductSummary] = None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class AuditLogPage(CamelModel):
    logs: List[AuditLogResponse]
    pagination: Pagination
