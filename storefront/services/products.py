"""Product catalog management with auditing."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.models.audit_log import ActionType
from storefront.models.product import Product, ProductStatus
from storefront.models.user import Role
from storefront.schemas.audit import AuditEvent
from storefront.schemas.auth import Principal
from storefront.schemas.product import ProductCreate, ProductResponse
from storefront.services import cache as views
from storefront.services.audit import AuditRecorder
from storefront.services.authorization import AuthorizationGate
from storefront.services.errors import NotFoundError, StorageError
from storefront.services.validation import parse_payload

ENTITY_TYPE = "Product"
REQUIRED_FIELDS_MESSAGE = "Name, price, and stock are required fields"


class ProductNotFoundError(NotFoundError):
    """Raised when the target product does not exist."""


def format_price(price: float) -> str:
    return format(price, ".2f").rstrip("0").rstrip(".")


def product_snapshot(product: Product) -> Dict[str, Any]:
    """Serializable view of a product as stored in audit payloads."""

    return {
        "name": product.name,
        "price": product.price,
        "stock": product.stock,
        "status": ProductStatus(product.status).value,
        "imageUrl": product.image_url,
        "availableAt": product.available_at.isoformat() if product.available_at else None,
    }


class ProductService:
    """Seller-facing catalog CRUD plus the public active-product listing."""

    def __init__(
        self,
        session: Session,
        audit: Optional[AuditRecorder] = None,
        cache: Optional[views.ViewCache] = None,
        gate: Optional[AuthorizationGate] = None,
    ) -> None:
        self._session = session
        self._audit = audit or AuditRecorder(session)
        self._cache = cache or views.get_view_cache()
        self._gate = gate or AuthorizationGate()
        self._logger = logging.getLogger("storefront.services.products")

    def list_products(self, principal: Optional[Principal]) -> List[ProductResponse]:
        self._gate.require(principal, Role.SELLER, action="access products")
        return self._cached_listing(views.PRODUCTS, select(Product))

    def list_active_products(self) -> List[ProductResponse]:
        """Products customers can browse; no role required."""

        stmt = select(Product).where(Product.status == ProductStatus.ACTIVE)
        return self._cached_listing(views.ACTIVE_PRODUCTS, stmt)

    def get_product(self, principal: Optional[Principal], product_id: Union[int, str]) -> Product:
        self._gate.require(principal, Role.SELLER, action="access products")
        return self._get(product_id)

    def create_product(self, principal: Optional[Principal], payload: Any) -> Product:
        principal = self._gate.require(principal, Role.SELLER, action="create products")
        data = parse_payload(ProductCreate, payload, REQUIRED_FIELDS_MESSAGE)

        product = Product(**self._column_values(data))
        self._session.add(product)
        self._flush("create product")

        self._audit.record(
            AuditEvent(
                action_type=ActionType.CREATE,
                entity_type=ENTITY_TYPE,
                entity_id=str(product.id),
                description=(
                    f"Product '{product.name}' was created with price {format_price(product.price)} "
                    f"and status {ProductStatus(product.status).value}"
                ),
                user_id=principal.id,
                product_id=product.id,
                data=product_snapshot(product),
            )
        )
        views.invalidate_on_commit(self._session, self._cache, views.PRODUCTS)
        self._logger.info("product_created", extra={"product_id": product.id, "actor_id": str(principal.id)})
        return product

    def update_product(self, principal: Optional[Principal], product_id: Union[int, str], payload: Any) -> Product:
        """Replace every editable field of a product."""

        principal = self._gate.require(principal, Role.SELLER, action="update products")
        data = parse_payload(ProductCreate, payload, REQUIRED_FIELDS_MESSAGE)
        product = self._get(product_id)

        previous = product_snapshot(product)
        for field, value in self._column_values(data).items():
            setattr(product, field, value)
        self._flush("update product")

        self._audit.record(
            AuditEvent(
                action_type=ActionType.UPDATE,
                entity_type=ENTITY_TYPE,
                entity_id=str(product.id),
                description=f"Product '{product.name}' was updated",
                user_id=principal.id,
                product_id=product.id,
                data={"previousData": previous, "newData": product_snapshot(product)},
            )
        )
        views.invalidate_on_commit(self._session, self._cache, views.PRODUCTS)
        self._logger.info("product_updated", extra={"product_id": product.id, "actor_id": str(principal.id)})
        return product

    def delete_product(self, principal: Optional[Principal], product_id: Union[int, str]) -> Dict[str, bool]:
        principal = self._gate.require(principal, Role.SELLER, action="delete products")
        product = self._get(product_id)

        # Recorded first so the row can describe the product before it disappears.
        self._audit.record(
            AuditEvent(
                action_type=ActionType.DELETE,
                entity_type=ENTITY_TYPE,
                entity_id=str(product.id),
                description=f"Product '{product.name}' with price {format_price(product.price)} was deleted",
                user_id=principal.id,
                data={"deletedProduct": product_snapshot(product)},
            )
        )

        deleted_id = product.id
        self._session.delete(product)
        self._flush("delete product")

        views.invalidate_on_commit(self._session, self._cache, views.PRODUCTS)
        self._logger.info("product_deleted", extra={"product_id": deleted_id, "actor_id": str(principal.id)})
        return {"success": True}

    def _cached_listing(self, collection: str, stmt) -> List[ProductResponse]:  # noqa: ANN001
        cached = self._cache.get(collection)
        if cached is not None:
            return [ProductResponse.model_validate(item) for item in cached]

        products = self._session.scalars(stmt.order_by(Product.name.asc())).all()
        results = [ProductResponse.model_validate(product) for product in products]
        self._cache.set(collection, [result.model_dump(mode="json") for result in results])
        return results

    @staticmethod
    def _column_values(data: ProductCreate) -> Dict[str, Any]:
        return {
            "name": data.name,
            "image_url": data.image_url or "",
            "price": data.price,
            "stock": data.stock,
            "status": data.status,
            "available_at": data.available_at or datetime.now(timezone.utc),
        }

    def _get(self, product_id: Union[int, str]) -> Product:
        try:
            key = int(product_id)
        except (TypeError, ValueError):
            raise ProductNotFoundError("Product not found") from None
        product = self._session.get(Product, key)
        if not product:
            raise ProductNotFoundError("Product not found")
        return product

    def _flush(self, action: str) -> None:
        try:
            self._session.flush()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StorageError(f"Failed to {action}") from exc
