from __future__ import annotations

import json

import httpx
from sqlalchemy import text

from storefront.core.database import session_scope
from storefront.services.cache import (
    ACTIVE_PRODUCTS,
    PRODUCTS,
    USERS,
    InMemoryViewCache,
    RedisViewCache,
    invalidate_on_commit,
)


class FakeUpstash:
    """Minimal Upstash REST endpoint backed by a dict."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.commands: list[list[str]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer token-123"
        command = json.loads(request.content)
        self.commands.append(command)
        name, key, *rest = command
        if name == "GET":
            return httpx.Response(200, json={"result": self.store.get(key)})
        if name == "SET":
            self.store[key] = rest[0]
            return httpx.Response(200, json={"result": "OK"})
        if name == "DEL":
            removed = 1 if self.store.pop(key, None) is not None else 0
            return httpx.Response(200, json={"result": removed})
        return httpx.Response(400, json={"error": f"unsupported command {name}"})


def test_in_memory_cache_returns_copies() -> None:
    cache = InMemoryViewCache()
    items = [{"id": 1}]
    cache.set(PRODUCTS, items)
    items.append({"id": 2})

    cached = cache.get(PRODUCTS)
    assert cached == [{"id": 1}]
    cached.append({"id": 3})
    assert cache.get(PRODUCTS) == [{"id": 1}]


def test_product_invalidation_drops_dependent_views_on_commit() -> None:
    cache = InMemoryViewCache()
    cache.set(PRODUCTS, [{"id": 1}])
    cache.set(ACTIVE_PRODUCTS, [{"id": 1}])
    cache.set(USERS, [{"id": "u"}])

    with session_scope() as session:
        invalidate_on_commit(session, cache, PRODUCTS)
        assert cache.get(PRODUCTS) == [{"id": 1}]

    assert cache.get(PRODUCTS) is None
    assert cache.get(ACTIVE_PRODUCTS) is None
    assert cache.get(USERS) == [{"id": "u"}]


def test_redis_cache_round_trips_through_rest_api() -> None:
    upstash = FakeUpstash()
    cache = RedisViewCache(
        url="https://cache.example.com/",
        token="token-123",
        prefix="storefront",
        ttl_seconds=30,
        transport=httpx.MockTransport(upstash),
    )

    assert cache.get(USERS) is None
    cache.set(USERS, [{"id": "u-1", "name": "Ada"}])
    assert cache.get(USERS) == [{"id": "u-1", "name": "Ada"}]

    set_command = next(command for command in upstash.commands if command[0] == "SET")
    assert set_command[1] == "storefront:view:users"
    assert set_command[3:] == ["PX", "30000"]

    with session_scope() as session:
        invalidate_on_commit(session, cache, USERS)
    assert cache.get(USERS) is None
    assert ["DEL", "storefront:view:users"] in upstash.commands


def test_rollback_discards_pending_invalidations() -> None:
    cache = InMemoryViewCache()
    cache.set(USERS, [{"id": "u"}])

    with session_scope() as session:
        session.execute(text("SELECT 1"))
        invalidate_on_commit(session, cache, USERS)
        session.rollback()

    assert cache.get(USERS) == [{"id": "u"}]
