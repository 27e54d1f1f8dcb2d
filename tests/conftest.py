import os
import sys
import warnings
from pathlib import Path
from typing import Callable, Dict, Optional
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("STOREFRONT_ENVIRONMENT", "test")
os.environ.setdefault("STOREFRONT_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("STOREFRONT_REDIS_URL", "")
os.environ.setdefault("STOREFRONT_REDIS_TOKEN", "")
os.environ.setdefault("STOREFRONT_JWT_SECRET", "test-secret")
os.environ.setdefault("STOREFRONT_BCRYPT_ROUNDS", "4")
os.environ.setdefault("STOREFRONT_LOG_JSON", "false")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from storefront.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from sqlalchemy import func, select  # noqa: E402

from storefront.core.database import engine, session_scope  # noqa: E402
from storefront.core.security import create_access_token, hash_password  # noqa: E402
from storefront.main import create_app  # noqa: E402
from storefront.models import Base, Role, User  # noqa: E402
from storefront.schemas.auth import Principal  # noqa: E402
from storefront.services import cache as cache_module  # noqa: E402
from storefront.services.audit import AuditRecorder  # noqa: E402
from storefront.services.errors import AuditWriteError  # noqa: E402
from storefront.services.identity import principal_for  # noqa: E402

DEFAULT_PASSWORD = "correct-horse"


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    cache_module._shared_cache = cache_module.InMemoryViewCache()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client() -> TestClient:  # noqa: ANN001
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def create_account() -> Callable[..., Principal]:
    def _create(
        role: Role,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
    ) -> Principal:
        with session_scope() as session:
            user = User(
                name=name or f"{role.value.title()} {uuid4().hex[:6]}",
                email=email or f"{role.value.lower()}-{uuid4().hex[:8]}@example.com",
                password=hash_password(password),
                role=role,
            )
            session.add(user)
            session.flush()
            return principal_for(user)

    return _create


@pytest.fixture()
def admin(create_account) -> Principal:  # noqa: ANN001
    return create_account(Role.ADMIN, name="Ada Admin", email="admin@example.com")


@pytest.fixture()
def seller(create_account) -> Principal:  # noqa: ANN001
    return create_account(Role.SELLER, name="Sam Seller", email="seller@example.com")


@pytest.fixture()
def customer(create_account) -> Principal:  # noqa: ANN001
    return create_account(Role.CUSTOMER, name="Cleo Customer", email="customer@example.com")


@pytest.fixture()
def failing_audit(monkeypatch) -> None:  # noqa: ANN001
    """Make every audit insert fail the way an unavailable audit table would."""

    def _fail(self, event, actor_id):  # noqa: ANN001
        raise AuditWriteError(f"audit store unavailable for {event.entity_type} {event.entity_id}")

    monkeypatch.setattr(AuditRecorder, "_write", _fail)


def auth_headers(principal: Principal) -> Dict[str, str]:
    token = create_access_token(
        {
            "sub": str(principal.id),
            "role": principal.role.value,
            "name": principal.name,
            "email": principal.email,
        }
    )
    return {"Authorization": f"Bearer {token}"}


def count_rows(model, *conditions) -> int:  # noqa: ANN001
    with session_scope() as session:
        return session.scalar(select(func.count()).select_from(model).where(*conditions))


warnings.filterwarnings("ignore", category=DeprecationWarning, module="jose")
