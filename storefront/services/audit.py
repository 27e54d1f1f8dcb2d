"""Audit trail: best-effort recorder and paginated query service."""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from storefront.models.audit_log import AuditLog
from storefront.schemas.audit import (
    AuditEvent,
    AuditLogFilter,
    AuditLogPage,
    AuditLogResponse,
    Pagination,
)
from storefront.schemas.auth import Principal
from storefront.services.errors import AuditWriteError, PayloadValidationError


class AuditRecorder:
    """Appends one audit row per call and never raises.

    The row is written inside a SAVEPOINT, so a failed insert is rolled back on
    its own and the caller's pending mutation is left intact. When the event
    carries no ``user_id`` the principal bound to the recorder is used as the
    actor; without one the row is attributed to the system.
    """

    def __init__(self, session: Session, principal: Optional[Principal] = None) -> None:
        self._session = session
        self._principal = principal
        self._logger = logging.getLogger("storefront.audit")

    def bind(self, principal: Optional[Principal]) -> "AuditRecorder":
        """Return a recorder sharing this session but attributing rows to ``principal``."""

        return AuditRecorder(self._session, principal)

    def record(self, event: AuditEvent) -> None:
        actor_id = event.user_id
        if actor_id is None and self._principal is not None:
            actor_id = self._principal.id

        try:
            entry = self._write(event, actor_id)
        except Exception:
            self._logger.exception(
                "audit_write_failed",
                extra={
                    "action_type": event.action_type.value,
                    "entity_type": event.entity_type,
                    "entity_id": event.entity_id,
                    "user_id": str(actor_id) if actor_id else None,
                },
            )
            return

        self._logger.info(
            "audit_event",
            extra={
                "audit_id": str(entry.id),
                "action_type": event.action_type.value,
                "entity_type": event.entity_type,
                "entity_id": event.entity_id,
                "user_id": str(actor_id) if actor_id else None,
            },
        )

    def _write(self, event: AuditEvent, actor_id) -> AuditLog:  # noqa: ANN001
        entry = AuditLog(
            timestamp=event.timestamp,
            action_type=event.action_type,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            description=event.description,
            data=self._snapshot(event.data),
            user_id=actor_id,
            user_entity_id=event.user_entity_id,
            product_id=event.product_id,
        )
        try:
            with self._session.begin_nested():
                self._session.add(entry)
        except SQLAlchemyError as exc:
            raise AuditWriteError(f"Failed to write audit log for {event.entity_type} {event.entity_id}") from exc
        return entry

    @staticmethod
    def _snapshot(data: Any) -> Any:
        if data is None:
            return None
        return json.loads(json.dumps(data, default=str))


class AuditQueryService:
    """Read-only, newest-first access to audit rows for display."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list(
        self,
        filters: Optional[AuditLogFilter] = None,
        *,
        page: int = 1,
        limit: int = 20,
    ) -> AuditLogPage:
        invalid = [name for name, value in (("page", page), ("limit", limit)) if value < 1]
        if invalid:
            raise PayloadValidationError("page and limit must be positive integers", invalid)

        filters = filters or AuditLogFilter()
        conditions = []
        if filters.entity_type:
            conditions.append(AuditLog.entity_type == filters.entity_type)
        if filters.action_type:
            conditions.append(AuditLog.action_type == filters.action_type)

        stmt = (
            select(AuditLog)
            .options(
                selectinload(AuditLog.user),
                selectinload(AuditLog.user_entity),
                selectinload(AuditLog.product),
            )
            .where(*conditions)
            .order_by(AuditLog.timestamp.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        logs = self._session.scalars(stmt).all()
        total = self._session.scalar(select(func.count()).select_from(AuditLog).where(*conditions)) or 0

        return AuditLogPage(
            logs=[AuditLogResponse.model_validate(log) for log in logs],
            pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
        )
