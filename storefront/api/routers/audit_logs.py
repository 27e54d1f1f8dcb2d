"""Audit trail endpoints (admin only)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from storefront.api.dependencies import get_audit_query_service, require_admin
from storefront.core.config import AppSettings, get_settings
from storefront.models.audit_log import ActionType
from storefront.schemas.audit import AuditLogFilter, AuditLogPage
from storefront.schemas.auth import Principal
from storefront.services.audit import AuditQueryService
from storefront.services.errors import PayloadValidationError

router = APIRouter()


@router.get("", response_model=AuditLogPage)
def get_audit_logs(
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    entity_type: Optional[str] = Query(default=None, alias="entityType", max_length=64),
    action_type: Optional[ActionType] = Query(default=None, alias="actionType"),
    _admin: Principal = Depends(require_admin),
    service: AuditQueryService = Depends(get_audit_query_service),
    settings: AppSettings = Depends(get_settings),
) -> AuditLogPage:
    limit = limit or settings.audit_page_size
    if limit > settings.audit_max_page_size:
        raise PayloadValidationError(f"limit must not exceed {settings.audit_max_page_size}", ["limit"])

    filters = AuditLogFilter(entity_type=entity_type, action_type=action_type)
    return service.list(filters, page=page, limit=limit)
