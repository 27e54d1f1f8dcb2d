"""Catalog products."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String
from sqlalchemy import Enum as SqlEnum
from sqlalchemy.orm import Mapped, mapped_column

from storefront.models.base import Base, TimestampMixin
from storefront.models.types import Money


class ProductStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class Product(TimestampMixin, Base):
    """A sellable item; any seller may edit any product."""

    __tablename__ = "products"
    __table_args__ = (
        Index("ix_products_status", "status"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(length=255), nullable=False)
    image_url: Mapped[str] = mapped_column(String(length=1024), nullable=False, default="")
    price: Mapped[float] = mapped_column(Money, nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[ProductStatus] = mapped_column(
        SqlEnum(
            ProductStatus,
            name="product_status",
            native_enum=True,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=ProductStatus.INACTIVE,
        nullable=False,
    )
    available_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
