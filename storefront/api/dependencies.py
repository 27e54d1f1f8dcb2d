"""Dependency injection helpers for FastAPI routes."""

from __future__ import annotations

from typing import Iterator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from storefront.core.database import get_session
from storefront.models.user import Role
from storefront.schemas.auth import Principal
from storefront.services.audit import AuditQueryService, AuditRecorder
from storefront.services.authorization import AuthorizationGate
from storefront.services.cache import get_view_cache
from storefront.services.identity import IdentityService, resolve_principal
from storefront.services.maintenance import MaintenanceService
from storefront.services.products import ProductService
from storefront.services.users import UserService

bearer_scheme = HTTPBearer(auto_error=False)


def get_db_session() -> Iterator[Session]:
    yield from get_session()


def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Principal]:
    """Resolve the caller once per request; ``None`` when unauthenticated."""

    return resolve_principal(credentials.credentials if credentials else None)


def require_admin(principal: Optional[Principal] = Depends(get_principal)) -> Principal:
    return AuthorizationGate().require(principal, Role.ADMIN, action="view audit logs")


def get_audit_recorder(
    session: Session = Depends(get_db_session),
    principal: Optional[Principal] = Depends(get_principal),
) -> AuditRecorder:
    return AuditRecorder(session, principal)


def get_user_service(
    session: Session = Depends(get_db_session),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> UserService:
    return UserService(session, audit=audit, cache=get_view_cache())


def get_product_service(
    session: Session = Depends(get_db_session),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> ProductService:
    return ProductService(session, audit=audit, cache=get_view_cache())


def get_identity_service(
    session: Session = Depends(get_db_session),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> IdentityService:
    return IdentityService(session, audit=audit)


def get_audit_query_service(session: Session = Depends(get_db_session)) -> AuditQueryService:
    return AuditQueryService(session)


def get_maintenance_service(session: Session = Depends(get_db_session)) -> MaintenanceService:
    return MaintenanceService(session, cache=get_view_cache())
