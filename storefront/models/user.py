"""User accounts."""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Optional

from sqlalchemy import Enum as SqlEnum
from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from storefront.models.base import Base, TimestampMixin
from storefront.models.types import GUID


class Role(str, Enum):
    ADMIN = "ADMIN"
    SELLER = "SELLER"
    CUSTOMER = "CUSTOMER"


class User(TimestampMixin, Base):
    """A person who can sign in; ``role`` drives every authorization check."""

    __tablename__ = "users"
    __table_args__ = (Index("ix_users_role", "role"),)

    id: Mapped[uuid.UUID] = mapped_column(GUID, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(length=255), nullable=False)
    email: Mapped[str] = mapped_column(String(length=320), nullable=False, unique=True)
    # bcrypt hash; NULL for accounts created through a federated provider
    password: Mapped[Optional[str]] = mapped_column(String(length=255), nullable=True)
    role: Mapped[Role] = mapped_column(
        SqlEnum(Role, name="user_role", native_enum=True, values_callable=lambda x: [e.value for e in x]),
        default=Role.CUSTOMER,
        nullable=False,
    )
    image: Mapped[Optional[str]] = mapped_column(String(length=1024), nullable=True)
