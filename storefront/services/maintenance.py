"""Administrative bulk operations: bootstrap admin, demo catalog seed, truncation."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from storefront.core.security import hash_password
from storefront.models.audit_log import AuditLog
from storefront.models.product import Product, ProductStatus
from storefront.models.user import Role, User
from storefront.schemas.auth import Principal
from storefront.services import cache as views
from storefront.services.authorization import AuthorizationGate

_IMAGE_BASE = "https://uwja77bygk2kgfqe.public.blob.vercel-storage.com"

DEMO_CATALOG: List[Dict[str, object]] = [
    {"name": "Smartphone X Pro", "image": "smartphone-gaPvyZW6aww0IhD3dOpaU6gBGILtcJ.webp", "price": 999.0, "stock": 150, "status": ProductStatus.ACTIVE},
    {"name": "Wireless Earbuds Ultra", "image": "earbuds-3rew4JGdIK81KNlR8Edr8NBBhFTOtX.webp", "price": 199.0, "stock": 300, "status": ProductStatus.ACTIVE},
    {"name": "Smart Home Hub", "image": "home-iTeNnmKSMnrykOS9IYyJvnLFgap7Vw.webp", "price": 149.0, "stock": 200, "status": ProductStatus.ACTIVE},
    {"name": "4K Ultra HD Smart TV", "image": "tv-H4l26crxtm9EQHLWc0ddrsXZ0V0Ofw.webp", "price": 799.0, "stock": 50, "status": ProductStatus.INACTIVE, "available_in_days": 7},
    {"name": "Gaming Laptop Pro", "image": "laptop-9bgUhjY491hkxiMDeSgqb9R5I3lHNL.webp", "price": 1299.0, "stock": 75, "status": ProductStatus.ACTIVE},
    {"name": "VR Headset Plus", "image": "headset-lYnRnpjDbZkB78lS7nnqEJFYFAUDg6.webp", "price": 349.0, "stock": 0, "status": ProductStatus.ARCHIVED},
    {"name": "Smartwatch Elite", "image": "watch-S2VeARK6sEM9QFg4yNQNjHFaHc3sXv.webp", "price": 249.0, "stock": 250, "status": ProductStatus.ACTIVE},
    {"name": "Bluetooth Speaker Max", "image": "speaker-4Zk0Ctx5AvxnwNNTFWVK4Gtpru4YEf.webp", "price": 99.0, "stock": 400, "status": ProductStatus.ACTIVE},
    {"name": "Portable Charger Super", "image": "charger-GzRr0NSkCj0ZYWkTMvxXGZQu47w9r5.webp", "price": 59.0, "stock": 500, "status": ProductStatus.ACTIVE},
    {"name": "Smart Thermostat Pro", "image": "thermostat-8GnK2LDE3lZAjUVtiBk61RrSuqSTF7.webp", "price": 199.0, "stock": 175, "status": ProductStatus.INACTIVE},
]


class MaintenanceService:
    """Bulk operations outside the per-entity audit trail."""

    def __init__(
        self,
        session: Session,
        cache: Optional[views.ViewCache] = None,
        gate: Optional[AuthorizationGate] = None,
    ) -> None:
        self._session = session
        self._cache = cache or views.get_view_cache()
        self._gate = gate or AuthorizationGate()
        self._logger = logging.getLogger("storefront.services.maintenance")

    def ensure_bootstrap_admin(self, *, email: str, password: str, name: str) -> User:
        """Idempotently create the first administrator account."""

        user = self._session.scalar(select(User).where(User.email == email))
        if user is not None:
            return user

        user = User(name=name, email=email, password=hash_password(password), role=Role.ADMIN)
        self._session.add(user)
        self._session.flush()
        views.invalidate_on_commit(self._session, self._cache, views.USERS)
        self._logger.info("bootstrap_admin_created", extra={"user_id": str(user.id)})
        return user

    def seed_catalog(self, principal: Optional[Principal] = None, *, enforce: bool = True) -> int:
        """Replace every product with the demo catalog and return how many were created.

        ``enforce=False`` is for trusted local callers such as the seed script.
        """

        if enforce:
            self._gate.require(principal, Role.ADMIN, action="seed the catalog")

        deleted = self._session.execute(delete(Product)).rowcount
        now = datetime.now(timezone.utc)
        products = [
            Product(
                name=str(item["name"]),
                image_url=f"{_IMAGE_BASE}/{item['image']}",
                price=float(item["price"]),  # type: ignore[arg-type]
                stock=int(item["stock"]),  # type: ignore[arg-type]
                status=item["status"],
                available_at=now + timedelta(days=int(item.get("available_in_days", 0))),  # type: ignore[arg-type]
            )
            for item in DEMO_CATALOG
        ]
        self._session.add_all(products)
        self._session.flush()

        views.invalidate_on_commit(self._session, self._cache, views.PRODUCTS)
        self._logger.info("catalog_seeded", extra={"deleted": deleted, "created": len(products)})
        return len(products)

    def truncate(self, principal: Optional[Principal]) -> Dict[str, int]:
        """Remove every audit log, product and user. The only path that deletes audit rows."""

        principal = self._gate.require(principal, Role.ADMIN, action="truncate data")

        counts = {
            "auditLogs": self._session.execute(delete(AuditLog)).rowcount,
            "products": self._session.execute(delete(Product)).rowcount,
            "users": self._session.execute(delete(User)).rowcount,
        }
        views.invalidate_on_commit(self._session, self._cache, views.PRODUCTS)
        views.invalidate_on_commit(self._session, self._cache, views.USERS)
        self._logger.warning("data_truncated", extra={"actor_id": str(principal.id), **counts})
        return counts
