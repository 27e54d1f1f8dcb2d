"""Product API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from storefront.models.product import ProductStatus
from storefront.schemas.base import CamelModel


class ProductCreate(CamelModel):
    """Full product payload, used for both creation and replacement."""

    name: str = Field(..., min_length=1, max_length=255)
    image_url: str = Field(default="", max_length=1024)
    price: float = Field(..., ge=0)
    stock: int = Field(..., ge=0)
    status: ProductStatus = ProductStatus.INACTIVE
    available_at: Optional[datetime] = None


class ProductResponse(CamelModel):
    id: int
    name: str
    image_url: str
    price: float
    stock: int
    status: ProductStatus
    available_at: datetime
