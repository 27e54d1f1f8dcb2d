from __future__ import annotations

from fastapi.testclient import TestClient

from conftest import DEFAULT_PASSWORD, auth_headers, count_rows
from storefront.models import ActionType, AuditLog, Role, User
from storefront.schemas.auth import Principal


def login(client: TestClient, email: str, password: str = DEFAULT_PASSWORD):  # noqa: ANN201
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


def test_login_returns_token_and_records_login(client: TestClient, seller: Principal) -> None:
    response = login(client, "seller@example.com")
    response.raise_for_status()
    body = response.json()

    assert body["tokenType"] == "bearer"
    assert body["user"]["role"] == "SELLER"
    assert body["user"]["id"] == str(seller.id)

    assert count_rows(AuditLog, AuditLog.action_type == ActionType.LOGIN) == 1
    assert count_rows(AuditLog, AuditLog.user_id == seller.id, AuditLog.user_entity_id == seller.id) == 1

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['accessToken']}"})
    me.raise_for_status()
    assert me.json() == {"user": body["user"], "dashboard": "/seller"}


def test_bad_credentials_are_rejected_without_audit(client: TestClient, seller: Principal) -> None:
    wrong_password = login(client, "seller@example.com", "nope")
    unknown_email = login(client, "ghost@example.com")

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json()["detail"] == "Invalid credentials"
    assert count_rows(AuditLog) == 0


def test_dashboard_follows_role(client: TestClient, admin: Principal, customer: Principal) -> None:
    assert client.get("/api/v1/auth/me", headers=auth_headers(admin)).json()["dashboard"] == "/admin"
    assert client.get("/api/v1/auth/me", headers=auth_headers(customer)).json()["dashboard"] == "/customer"


def test_me_requires_a_valid_token(client: TestClient) -> None:
    assert client.get("/api/v1/auth/me").status_code == 401
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_logout_records_logout(client: TestClient, customer: Principal) -> None:
    response = client.post("/api/v1/auth/logout", headers=auth_headers(customer))
    response.raise_for_status()
    assert response.json() == {"success": True}
    assert count_rows(AuditLog, AuditLog.action_type == ActionType.LOGOUT, AuditLog.user_id == customer.id) == 1

    assert client.post("/api/v1/auth/logout").status_code == 401


def test_signup_always_creates_a_customer(client: TestClient) -> None:
    response = client.post(
        "/api/v1/auth/signup",
        json={"name": "Pat Public", "email": "pat@example.com", "password": "pw", "role": "ADMIN"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "CUSTOMER"

    assert count_rows(User, User.role == Role.ADMIN) == 0
    assert count_rows(AuditLog, AuditLog.action_type == ActionType.CREATE, AuditLog.user_id.is_(None)) == 1

    signed_in = login(client, "pat@example.com", "pw")
    assert signed_in.status_code == 200


def test_signup_rejects_duplicate_email(client: TestClient, customer: Principal) -> None:
    response = client.post(
        "/api/v1/auth/signup",
        json={"name": "Copy", "email": customer.email, "password": "pw"},
    )
    assert response.status_code == 409
    assert count_rows(AuditLog) == 0


def test_signup_requires_fields(client: TestClient) -> None:
    response = client.post("/api/v1/auth/signup", json={"email": "x@example.com"})
    assert response.status_code == 400
    assert set(response.json()["fields"]) == {"name", "password"}


def test_audit_write_failure_does_not_block_login(client: TestClient, seller: Principal, failing_audit) -> None:  # noqa: ANN001
    response = login(client, "seller@example.com")
    assert response.status_code == 200
    token = response.json()["accessToken"]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["user"]["id"] == str(seller.id)
    assert count_rows(AuditLog) == 0


def test_audit_write_failure_does_not_block_logout(client: TestClient, customer: Principal, failing_audit) -> None:  # noqa: ANN001
    response = client.post("/api/v1/auth/logout", headers=auth_headers(customer))
    assert response.status_code == 200
    assert count_rows(AuditLog) == 0
