"""User account management with auditing."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.core.security import hash_password
from storefront.models.audit_log import ActionType
from storefront.models.user import Role, User
from storefront.schemas.audit import AuditEvent
from storefront.schemas.auth import Principal
from storefront.schemas.user import UserCreate, UserRegister, UserResponse, UserUpdate
from storefront.services import cache as views
from storefront.services.audit import AuditRecorder
from storefront.services.authorization import AuthorizationGate
from storefront.services.errors import ConflictError, NotFoundError, StorageError
from storefront.services.validation import parse_payload

ENTITY_TYPE = "User"
DUPLICATE_EMAIL_MESSAGE = "A user with this email already exists"
KEEP_WHEN_BLANK = frozenset({"password", "image"})


class UserNotFoundError(NotFoundError):
    """Raised when the target user does not exist."""


class UserService:
    """Admin-facing user CRUD; every mutation leaves one audit row."""

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
        self._logger = logging.getLogger("storefront.services.users")

    def list_users(self, principal: Optional[Principal]) -> List[UserResponse]:
        self._gate.require(principal, Role.ADMIN, action="view users")

        cached = self._cache.get(views.USERS)
        if cached is not None:
            return [UserResponse.model_validate(item) for item in cached]

        users = self._session.scalars(select(User).order_by(User.created_at.desc())).all()
        results = [UserResponse.model_validate(user) for user in users]
        self._cache.set(views.USERS, [result.model_dump(mode="json") for result in results])
        return results

    def get_user(self, principal: Optional[Principal], user_id: Union[uuid.UUID, str]) -> User:
        self._gate.require(principal, Role.ADMIN, action="view user details")
        return self._get(user_id)

    def create_user(self, principal: Optional[Principal], payload: Any) -> User:
        principal = self._gate.require(principal, Role.ADMIN, action="create users")
        data = parse_payload(UserCreate, payload, "Name, email, and password are required")

        user = self._insert(name=data.name, email=data.email, password=data.password, role=data.role, image=data.image)

        self._audit.record(
            AuditEvent(
                action_type=ActionType.CREATE,
                entity_type=ENTITY_TYPE,
                entity_id=str(user.id),
                description=f"User '{user.name}' ({user.email}) was created with role {user.role.value}",
                user_id=principal.id,
                user_entity_id=user.id,
                data={"name": user.name, "email": user.email, "role": user.role.value},
            )
        )
        views.invalidate_on_commit(self._session, self._cache, views.USERS)
        self._logger.info("user_created", extra={"user_id": str(user.id), "actor_id": str(principal.id)})
        return user

    def register(self, payload: Any) -> User:
        """Public sign-up. The account is always a CUSTOMER and the audit row has no actor."""

        data = parse_payload(UserRegister, payload, "Name, email, and password are required")
        user = self._insert(name=data.name, email=data.email, password=data.password, role=Role.CUSTOMER)

        self._audit.record(
            AuditEvent(
                action_type=ActionType.CREATE,
                entity_type=ENTITY_TYPE,
                entity_id=str(user.id),
                description=f"User '{user.name}' ({user.email}) signed up with role {user.role.value}",
                user_entity_id=user.id,
                data={"name": user.name, "email": user.email, "role": user.role.value},
            )
        )
        views.invalidate_on_commit(self._session, self._cache, views.USERS)
        self._logger.info("user_registered", extra={"user_id": str(user.id)})
        return user

    def update_user(self, principal: Optional[Principal], user_id: Union[uuid.UUID, str], payload: Any) -> User:
        principal = self._gate.require(principal, Role.ADMIN, action="update users")
        data = parse_payload(UserUpdate, payload, "Invalid user update")
        user = self._get(user_id)

        previous = {"name": user.name, "email": user.email, "role": user.role.value}
        # Omitted or null fields are left unchanged, and so are a blank password or image.
        updates = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None and not (key in KEEP_WHEN_BLANK and value == "")
        }

        if "email" in updates and updates["email"] != user.email:
            self._ensure_email_available(updates["email"])

        for field in ("name", "email", "role", "image"):
            if field in updates:
                setattr(user, field, updates[field])
        password_changed = "password" in updates
        if password_changed:
            user.password = hash_password(updates["password"])

        self._flush("update user", conflict_message=DUPLICATE_EMAIL_MESSAGE)

        new_data: Dict[str, Any] = {
            key: value.value if isinstance(value, Role) else value
            for key, value in updates.items()
            if key != "password"
        }
        self._audit.record(
            AuditEvent(
                action_type=ActionType.UPDATE,
                entity_type=ENTITY_TYPE,
                entity_id=str(user.id),
                description=f"User '{user.name}' was updated",
                user_id=principal.id,
                user_entity_id=user.id,
                data={"previousData": previous, "newData": new_data, "passwordChanged": password_changed},
            )
        )
        views.invalidate_on_commit(self._session, self._cache, views.USERS)
        self._logger.info(
            "user_updated",
            extra={"user_id": str(user.id), "actor_id": str(principal.id), "password_changed": password_changed},
        )
        return user

    def delete_user(self, principal: Optional[Principal], user_id: Union[uuid.UUID, str]) -> Dict[str, bool]:
        principal = self._gate.require(principal, Role.ADMIN, action="delete users")
        self._gate.forbid_self(principal, user_id)
        user = self._get(user_id)

        # Recorded first so the row can describe the account before it disappears.
        self._audit.record(
            AuditEvent(
                action_type=ActionType.DELETE,
                entity_type=ENTITY_TYPE,
                entity_id=str(user.id),
                description=f"User '{user.name}' ({user.email}) with role {user.role.value} was deleted",
                user_id=principal.id,
                data={"deletedUser": {"name": user.name, "email": user.email, "role": user.role.value}},
            )
        )

        deleted_id = str(user.id)
        self._session.delete(user)
        self._flush("delete user")

        views.invalidate_on_commit(self._session, self._cache, views.USERS)
        self._logger.info("user_deleted", extra={"user_id": deleted_id, "actor_id": str(principal.id)})
        return {"success": True}

    def _insert(self, *, name: str, email: str, password: str, role: Role, image: Optional[str] = None) -> User:
        self._ensure_email_available(email)
        user = User(name=name, email=email, password=hash_password(password), role=role, image=image)
        self._session.add(user)
        self._flush("create user", conflict_message=DUPLICATE_EMAIL_MESSAGE)
        return user

    def _ensure_email_available(self, email: str) -> None:
        existing = self._session.scalar(select(User.id).where(User.email == email))
        if existing is not None:
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

    def _get(self, user_id: Union[uuid.UUID, str]) -> User:
        try:
            key = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
        except ValueError:
            raise UserNotFoundError("User not found") from None
        user = self._session.get(User, key)
        if not user:
            raise UserNotFoundError("User not found")
        return user

    def _flush(self, action: str, *, conflict_message: Optional[str] = None) -> None:
        """Flush pending changes; integrity violations become a conflict only when ``conflict_message`` is given."""

        try:
            self._session.flush()
        except IntegrityError as exc:
            self._session.rollback()
            if conflict_message is None:
                raise StorageError(f"Failed to {action}") from exc
            raise ConflictError(conflict_message) from exc
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StorageError(f"Failed to {action}") from exc
