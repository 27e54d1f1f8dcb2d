from __future__ import annotations

from typing import Iterator
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from conftest import auth_headers, count_rows
from storefront.core.database import _enable_sqlite_savepoints, session_scope
from storefront.models import AuditLog, Base, Product, Role, User
from storefront.schemas.auth import Principal
from storefront.services.cache import ACTIVE_PRODUCTS, PRODUCTS, InMemoryViewCache
from storefront.services.identity import principal_for
from storefront.services.products import ProductService

SPEAKER = {"name": "Speaker", "price": 99, "stock": 10, "status": "active"}


def create_product(client: TestClient, seller: Principal, **overrides) -> dict:
    response = client.post("/api/v1/products", json={**SPEAKER, **overrides}, headers=auth_headers(seller))
    response.raise_for_status()
    return response.json()


def product_logs(client: TestClient, admin: Principal, **params) -> list[dict]:
    response = client.get(
        "/api/v1/audit-logs",
        params={"entityType": "Product", **params},
        headers=auth_headers(admin),
    )
    response.raise_for_status()
    return response.json()["logs"]


def test_seller_creates_product_and_audit_log_is_recorded(
    client: TestClient, seller: Principal, admin: Principal
) -> None:
    product = create_product(client, seller)
    assert product["id"]
    assert product["stock"] == 10
    assert product["price"] == 99
    assert product["imageUrl"] == ""

    logs = product_logs(client, admin)
    assert len(logs) == 1
    first = logs[0]
    assert first["actionType"] == "CREATE"
    assert first["entityType"] == "Product"
    assert first["entityId"] == str(product["id"])
    assert first["data"]["price"] == 99
    assert first["userId"] == str(seller.id)
    assert first["productId"] == product["id"]
    assert first["product"]["name"] == "Speaker"
    assert first["user"]["email"] == seller.email
    assert first["description"] == "Product 'Speaker' was created with price 99 and status active"


def test_product_update_records_previous_and_new_data(
    client: TestClient, seller: Principal, admin: Principal
) -> None:
    product = create_product(client, seller)

    response = client.put(
        f"/api/v1/products/{product['id']}",
        json={"name": "Speaker Max", "price": 129.5, "stock": 4, "status": "inactive"},
        headers=auth_headers(seller),
    )
    response.raise_for_status()
    updated = response.json()
    assert updated["name"] == "Speaker Max"
    assert updated["price"] == 129.5
    assert updated["status"] == "inactive"

    logs = product_logs(client, admin, actionType="UPDATE")
    assert len(logs) == 1
    data = logs[0]["data"]
    assert data["previousData"]["name"] == "Speaker"
    assert data["previousData"]["price"] == 99
    assert data["newData"]["name"] == "Speaker Max"
    assert data["newData"]["stock"] == 4
    assert logs[0]["description"] == "Product 'Speaker Max' was updated"


def test_product_delete_records_snapshot_then_removes_product(
    client: TestClient, seller: Principal, admin: Principal
) -> None:
    product = create_product(client, seller)

    response = client.delete(f"/api/v1/products/{product['id']}", headers=auth_headers(seller))
    response.raise_for_status()
    assert response.json() == {"success": True}

    missing = client.get(f"/api/v1/products/{product['id']}", headers=auth_headers(seller))
    assert missing.status_code == 404

    logs = product_logs(client, admin, actionType="DELETE")
    assert len(logs) == 1
    assert logs[0]["entityId"] == str(product["id"])
    assert logs[0]["productId"] is None
    assert logs[0]["data"]["deletedProduct"]["name"] == "Speaker"
    assert logs[0]["description"] == "Product 'Speaker' with price 99 was deleted"

    # The CREATE row survives; its product reference is cleared by the database.
    created = product_logs(client, admin, actionType="CREATE")
    assert len(created) == 1
    assert created[0]["productId"] is None


def test_customer_cannot_mutate_products(client: TestClient, seller: Principal, customer: Principal) -> None:
    product = create_product(client, seller)
    audit_rows_before = count_rows(AuditLog)

    create = client.post("/api/v1/products", json=SPEAKER, headers=auth_headers(customer))
    update = client.put(f"/api/v1/products/{product['id']}", json=SPEAKER, headers=auth_headers(customer))
    delete = client.delete(f"/api/v1/products/{product['id']}", headers=auth_headers(customer))

    assert create.status_code == 403
    assert update.status_code == 403
    assert delete.status_code == 403
    assert "Unauthorized" in create.json()["detail"]
    assert count_rows(Product) == 1
    assert count_rows(AuditLog) == audit_rows_before


def test_role_check_runs_before_validation(client: TestClient, customer: Principal) -> None:
    response = client.post("/api/v1/products", json={}, headers=auth_headers(customer))
    assert response.status_code == 403


def test_anonymous_product_mutation_requires_authentication(client: TestClient) -> None:
    response = client.post("/api/v1/products", json=SPEAKER)
    assert response.status_code == 401
    assert count_rows(Product) == 0


def test_missing_required_fields_are_listed(client: TestClient, seller: Principal) -> None:
    response = client.post("/api/v1/products", json={"imageUrl": "x.webp"}, headers=auth_headers(seller))
    assert response.status_code == 400
    body = response.json()
    assert set(body["fields"]) == {"name", "price", "stock"}
    assert "Name, price, and stock are required fields" in body["detail"]
    assert count_rows(Product) == 0
    assert count_rows(AuditLog) == 0


def test_negative_price_and_stock_rejected(client: TestClient, seller: Principal) -> None:
    response = client.post(
        "/api/v1/products",
        json={"name": "Broken", "price": -1, "stock": -5},
        headers=auth_headers(seller),
    )
    assert response.status_code == 400
    assert set(response.json()["fields"]) == {"price", "stock"}


def test_update_of_unknown_product_returns_404(client: TestClient, seller: Principal) -> None:
    response = client.put("/api/v1/products/9999", json=SPEAKER, headers=auth_headers(seller))
    assert response.status_code == 404
    assert response.json()["detail"] == "Product not found"
    assert count_rows(AuditLog) == 0


def test_active_listing_is_public_and_refreshed_after_mutations(client: TestClient, seller: Principal) -> None:
    create_product(client, seller, name="Visible")
    create_product(client, seller, name="Hidden", status="inactive")

    first = client.get("/api/v1/products/active")
    first.raise_for_status()
    assert [item["name"] for item in first.json()] == ["Visible"]

    create_product(client, seller, name="Another")
    second = client.get("/api/v1/products/active")
    assert [item["name"] for item in second.json()] == ["Another", "Visible"]


def test_seller_listing_is_ordered_by_name(client: TestClient, seller: Principal) -> None:
    create_product(client, seller, name="Zeta")
    create_product(client, seller, name="Alpha", status="archived")

    response = client.get("/api/v1/products", headers=auth_headers(seller))
    response.raise_for_status()
    assert [item["name"] for item in response.json()] == ["Alpha", "Zeta"]


def test_audit_write_failure_does_not_fail_creation(client: TestClient, seller: Principal, failing_audit) -> None:  # noqa: ANN001
    response = client.post("/api/v1/products", json=SPEAKER, headers=auth_headers(seller))
    assert response.status_code == 201
    assert count_rows(Product) == 1
    assert count_rows(AuditLog) == 0


def test_audit_write_failure_does_not_fail_update(client: TestClient, seller: Principal, failing_audit) -> None:  # noqa: ANN001
    product = create_product(client, seller)

    response = client.put(
        f"/api/v1/products/{product['id']}",
        json={**SPEAKER, "name": "Speaker Mini", "price": 49},
        headers=auth_headers(seller),
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Speaker Mini"
    assert count_rows(Product, Product.name == "Speaker Mini", Product.price == 49) == 1
    assert count_rows(AuditLog) == 0


def test_rejected_audit_insert_is_rolled_back_alone(caplog) -> None:  # noqa: ANN001
    # The actor does not exist in the users table, so the audit insert violates its foreign key.
    ghost = Principal(id=uuid4(), role=Role.SELLER, name="Ghost", email="ghost@example.com")

    with session_scope() as session:
        product = ProductService(session).create_product(ghost, SPEAKER)
        product_id = product.id

    assert count_rows(Product, Product.id == product_id) == 1
    assert count_rows(AuditLog) == 0
    assert any(record.getMessage() == "audit_write_failed" for record in caplog.records)


def test_delete_proceeds_when_audit_insert_fails(seller: Principal) -> None:
    with session_scope() as session:
        product = ProductService(session).create_product(seller, SPEAKER)
        product_id = product.id

    ghost = Principal(id=uuid4(), role=Role.SELLER, name="Ghost", email="ghost@example.com")
    with session_scope() as session:
        result = ProductService(session).delete_product(ghost, product_id)

    assert result == {"success": True}
    assert count_rows(Product) == 0
    assert count_rows(AuditLog, AuditLog.action_type == "DELETE") == 0


@pytest.fixture()
def file_sessions(tmp_path) -> Iterator[sessionmaker]:  # noqa: ANN001
    """Independent sessions over a SQLite file, so one can read while another holds an open write."""

    file_engine = create_engine(f"sqlite:///{tmp_path / 'storefront.db'}", connect_args={"check_same_thread": False})
    _enable_sqlite_savepoints(file_engine)
    Base.metadata.create_all(bind=file_engine)
    yield sessionmaker(bind=file_engine, expire_on_commit=False)
    file_engine.dispose()


def test_listing_cached_before_commit_is_dropped_when_the_write_commits(file_sessions: sessionmaker) -> None:
    cache = InMemoryViewCache()
    with file_sessions() as setup:
        user = User(name="Sam Seller", email="seller@example.com", role=Role.SELLER)
        setup.add(user)
        setup.commit()
        seller = principal_for(user)

    writer = file_sessions()
    try:
        ProductService(writer, cache=cache).create_product(seller, SPEAKER)

        # The uncommitted product is invisible here, so the empty listing gets cached.
        with file_sessions() as reader:
            assert ProductService(reader, cache=cache).list_active_products() == []
        assert cache.get(ACTIVE_PRODUCTS) == []

        writer.commit()
    finally:
        writer.close()

    assert cache.get(ACTIVE_PRODUCTS) is None
    assert cache.get(PRODUCTS) is None
    with file_sessions() as reader:
        listing = ProductService(reader, cache=cache).list_active_products()
    assert [product.name for product in listing] == ["Speaker"]


def test_rolled_back_write_leaves_cached_listing_alone(seller: Principal) -> None:
    cache = InMemoryViewCache()
    cache.set(ACTIVE_PRODUCTS, [])

    with pytest.raises(RuntimeError):
        with session_scope() as session:
            ProductService(session, cache=cache).create_product(seller, SPEAKER)
            raise RuntimeError("abort request")

    assert cache.get(ACTIVE_PRODUCTS) == []
    assert count_rows(Product) == 0
