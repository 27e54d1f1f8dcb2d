"""Listing cache invalidated by mutations; Upstash Redis with in-memory fallback."""

from __future__ import annotations

import json
from dataclasses import dataclass
from threading import RLock
from typing import Any, Dict, List, Optional, Protocol, Tuple

import httpx
from sqlalchemy import event
from sqlalchemy.orm import Session, SessionTransaction

from storefront.core.config import get_settings

USERS = "users"
PRODUCTS = "products"
ACTIVE_PRODUCTS = "products:active"

# Collections whose cached views go stale when the entity changes.
DEPENDENT_VIEWS: Dict[str, tuple[str, ...]] = {
    USERS: (USERS,),
    PRODUCTS: (PRODUCTS, ACTIVE_PRODUCTS),
}


class ViewCache(Protocol):
    """Contract for caching serialized listings keyed by collection name."""

    def get(self, collection: str) -> Optional[List[Dict[str, Any]]]:
        ...

    def set(self, collection: str, items: List[Dict[str, Any]]) -> None:
        ...

    def invalidate(self, collection: str) -> None:
        ...


_PENDING_KEY = "storefront.pending_view_invalidations"


def invalidate_on_commit(session: Session, cache: ViewCache, entity: str) -> None:
    """Drop every cached view derived from ``entity`` once ``session`` commits.

    Views read before the commit stay dropped afterwards; a rollback discards
    the pending invalidations.
    """

    pending: List[Tuple[ViewCache, str]] = session.info.setdefault(_PENDING_KEY, [])
    for collection in DEPENDENT_VIEWS.get(entity, (entity,)):
        if not any(queued is cache and name == collection for queued, name in pending):
            pending.append((cache, collection))


@event.listens_for(Session, "after_commit")
def _apply_pending_invalidations(session: Session) -> None:
    for cache, collection in session.info.pop(_PENDING_KEY, []):
        cache.invalidate(collection)


@event.listens_for(Session, "after_transaction_end")
def _discard_pending_invalidations(session: Session, transaction: SessionTransaction) -> None:
    if transaction.parent is None:
        session.info.pop(_PENDING_KEY, None)


@dataclass
class InMemoryViewCache(ViewCache):
    """Thread-safe process-local cache."""

    def __post_init__(self) -> None:
        self._store: Dict[str, List[Dict[str, Any]]] = {}
        self._lock = RLock()

    def get(self, collection: str) -> Optional[List[Dict[str, Any]]]:
        with self._lock:
            items = self._store.get(collection)
            return list(items) if items is not None else None

    def set(self, collection: str, items: List[Dict[str, Any]]) -> None:
        with self._lock:
            self._store[collection] = list(items)

    def invalidate(self, collection: str) -> None:
        with self._lock:
            self._store.pop(collection, None)


class RedisViewCache(ViewCache):
    """Redis-backed cache using the Upstash REST API."""

    def __init__(
        self,
        *,
        url: str,
        token: str,
        prefix: str,
        ttl_seconds: int,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=url.rstrip("/"),
            headers={"Authorization": f"Bearer {token}"},
            timeout=5.0,
            transport=transport,
        )
        self._ttl_ms = max(ttl_seconds, 1) * 1000
        self._prefix = prefix

    def get(self, collection: str) -> Optional[List[Dict[str, Any]]]:
        result = self._execute("GET", self._key(collection))
        if result is None:
            return None
        return json.loads(str(result))

    def set(self, collection: str, items: List[Dict[str, Any]]) -> None:
        payload = json.dumps(items, default=str)
        self._execute("SET", self._key(collection), payload, "PX", str(self._ttl_ms))

    def invalidate(self, collection: str) -> None:
        self._execute("DEL", self._key(collection))

    def _key(self, collection: str) -> str:
        return f"{self._prefix}:view:{collection}"

    def _execute(self, *command: str) -> Optional[object]:
        response = self._client.post("/", json=list(command))
        response.raise_for_status()
        return response.json().get("result")


_shared_cache: Optional[ViewCache] = None


def get_view_cache() -> ViewCache:
    """Return the process-wide view cache instance."""

    global _shared_cache
    if _shared_cache is not None:
        return _shared_cache

    settings = get_settings()
    if settings.redis_url and settings.redis_token:
        _shared_cache = RedisViewCache(
            url=settings.redis_url,
            token=settings.redis_token,
            prefix=settings.redis_cache_prefix,
            ttl_seconds=settings.redis_cache_ttl,
        )
    else:
        _shared_cache = InMemoryViewCache()

    return _shared_cache
