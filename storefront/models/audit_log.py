"""Audit log entries for traceability."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy import Enum as SqlEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.models.base import Base
from storefront.models.product import Product
from storefront.models.types import GUID, JSONType
from storefront.models.user import User


class ActionType(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditLog(Base):
    """Immutable record of one mutating action or sign-in.

    ``user_id`` is the actor, ``user_entity_id`` the user acted upon and
    ``product_id`` the product acted upon. All three are optional and are
    nulled by the database when the referenced row is deleted.
    """

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_timestamp", "timestamp"),
        Index("ix_audit_logs_entity_type", "entity_type"),
        Index("ix_audit_logs_action_type", "action_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID, primary_key=True, default=uuid.uuid4)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    action_type: Mapped[ActionType] = mapped_column(
        SqlEnum(ActionType, name="action_type", native_enum=True, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    entity_type: Mapped[str] = mapped_column(String(length=64), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(length=64), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[Optional[Any]] = mapped_column(JSONType, nullable=True)

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        GUID,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    user_entity_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        GUID,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    product_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
    )

    user: Mapped[Optional[User]] = relationship(User, foreign_keys=[user_id], viewonly=True)
    user_entity: Mapped[Optional[User]] = relationship(User, foreign_keys=[user_entity_id], viewonly=True)
    product: Mapped[Optional[Product]] = relationship(Product, foreign_keys=[product_id], viewonly=True)
