"""SQLAlchemy ORM models for the storefront service."""

from storefront.models.base import Base  # noqa: F401
from storefront.models.user import Role, User  # noqa: F401
from storefront.models.product import Product, ProductStatus  # noqa: F401
from storefront.models.audit_log import ActionType, AuditLog  # noqa: F401
