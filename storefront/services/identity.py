"""Credential verification, token resolution and sign-in auditing."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.core.config import AppSettings, get_settings
from storefront.core.security import create_access_token, decode_access_token, verify_password
from storefront.models.audit_log import ActionType
from storefront.models.user import Role, User
from storefront.schemas.audit import AuditEvent
from storefront.schemas.auth import Principal, TokenResponse
from storefront.services.audit import AuditRecorder
from storefront.services.errors import AuthenticationRequiredError

DASHBOARDS = {
    Role.ADMIN: "/admin",
    Role.SELLER: "/seller",
    Role.CUSTOMER: "/customer",
}


def principal_for(user: User) -> Principal:
    return Principal(id=user.id, role=user.role, name=user.name, email=user.email)


def resolve_principal(token: Optional[str], settings: Optional[AppSettings] = None) -> Optional[Principal]:
    """Build the principal carried by a bearer token, or ``None`` when it is absent or invalid."""

    if not token:
        return None
    claims = decode_access_token(token, settings)
    if not claims:
        return None
    try:
        return Principal(
            id=uuid.UUID(str(claims["sub"])),
            role=Role(claims["role"]),
            name=claims.get("name") or "",
            email=claims.get("email") or "",
        )
    except (KeyError, ValueError):
        return None


class IdentityService:
    """Signs users in and out; both events are audited on a best-effort basis."""

    def __init__(
        self,
        session: Session,
        audit: Optional[AuditRecorder] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        self._session = session
        self._audit = audit or AuditRecorder(session)
        self._settings = settings or get_settings()
        self._logger = logging.getLogger("storefront.services.identity")

    def authenticate(self, email: str, password: str) -> TokenResponse:
        user = self._session.scalar(select(User).where(User.email == email.strip()))
        if user is None or not verify_password(password, user.password):
            self._logger.info("login_failed", extra={"email": email})
            raise AuthenticationRequiredError("Invalid credentials")

        principal = principal_for(user)
        token = create_access_token(
            {
                "sub": str(user.id),
                "role": user.role.value,
                "name": user.name,
                "email": user.email,
            },
            self._settings,
        )

        self._audit.record(
            AuditEvent(
                action_type=ActionType.LOGIN,
                entity_type="User",
                entity_id=str(user.id),
                description=f"User '{user.name}' ({user.email}) logged in",
                user_id=user.id,
                user_entity_id=user.id,
            )
        )
        self._logger.info("login_succeeded", extra={"user_id": str(user.id), "role": user.role.value})
        return TokenResponse(access_token=token, user=principal)

    def logout(self, principal: Optional[Principal]) -> None:
        if principal is None:
            raise AuthenticationRequiredError("Unauthorized: authentication required to log out")

        # Tokens are stateless; signing out only leaves a trail.
        self._audit.record(
            AuditEvent(
                action_type=ActionType.LOGOUT,
                entity_type="User",
                entity_id=str(principal.id),
                description=f"User '{principal.name}' ({principal.email}) logged out",
                user_id=principal.id,
                user_entity_id=principal.id,
            )
        )
        self._logger.info("logout", extra={"user_id": str(principal.id)})

    @staticmethod
    def dashboard_for(principal: Principal) -> str:
        return DASHBOARDS[principal.role]
