"""Role checks applied in front of every service operation."""

from __future__ import annotations

import logging
from typing import Optional, Union
from uuid import UUID

from storefront.models.user import Role
from storefront.schemas.auth import Principal
from storefront.services.errors import AuthenticationRequiredError, UnauthorizedError


class AuthorizationGate:
    """Synchronous role gate; it never touches the store."""

    def __init__(self) -> None:
        self._logger = logging.getLogger("storefront.services.authorization")

    def require(self, principal: Optional[Principal], *roles: Role, action: str) -> Principal:
        """Return ``principal`` when its role is one of ``roles``, otherwise raise."""

        if principal is None:
            self._logger.info("authorization_denied", extra={"action": action, "reason": "unauthenticated"})
            raise AuthenticationRequiredError(f"Unauthorized: authentication required to {action}")

        if principal.role not in roles:
            self._logger.info(
                "authorization_denied",
                extra={
                    "action": action,
                    "reason": "role",
                    "principal_id": str(principal.id),
                    "principal_role": principal.role.value,
                },
            )
            allowed = " or ".join(f"{role.value.lower()}s" for role in roles)
            raise UnauthorizedError(f"Unauthorized: only {allowed} can {action}")

        return principal

    def forbid_self(self, principal: Optional[Principal], target_id: Union[UUID, str]) -> None:
        """Reject a principal acting on its own account, whatever its role."""

        if principal is not None and str(principal.id) == str(target_id):
            self._logger.info(
                "authorization_denied",
                extra={"action": "delete user", "reason": "self", "principal_id": str(principal.id)},
            )
            raise UnauthorizedError("Cannot delete your own account")
