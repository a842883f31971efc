"""Read-through Redis cache for halls, quotations and bookings.

Entities live under ``{kind}:{id}``. Listing pages live under a versioned
namespace ``{kind}:list:v{n}:{digest}``; every write deletes the entity key
and bumps ``n`` so all listings of that kind are orphaned without a key scan
and age out through their TTL.
"""

import hashlib
import logging
import random
from typing import Any, Callable, Mapping, Optional

import orjson
import redis

from hall_service.core.config import settings
from .json_utils import dumps, loads

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None

HALL = "hall"
QUOTATION = "quotation"
BOOKING = "booking"


class _NullRedis:
    """No-op Redis client used when Redis is disabled or unavailable."""

    def get(self, key: str):
        return None

    def setex(self, key: str, expire: int, value: str):
        return None

    def delete(self, *keys: str):
        return 0

    def incr(self, key: str, amount: int = 1):
        return 0

    def close(self):
        return None


def get_redis_client() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        url = (settings.REDIS_URL or "").strip()
        # Allow disabling via empty/none/disabled/false
        if not url or url.lower() in {"none", "disabled", "false", "0"}:
            _redis_client = _NullRedis()  # type: ignore[assignment]
            return _redis_client
        try:
            _redis_client = redis.from_url(
                url,
                decode_responses=True,
                socket_connect_timeout=settings.REDIS_CONNECT_TIMEOUT,
                socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            )
        except (redis.exceptions.RedisError, ValueError) as exc:
            logger.warning("Redis client unavailable, caching disabled: %s", exc)
            _redis_client = _NullRedis()  # type: ignore[assignment]
    return _redis_client


def close_redis_client() -> None:
    global _redis_client
    if _redis_client is not None:
        try:
            _redis_client.close()
        except redis.exceptions.RedisError as exc:
            logger.warning("Error closing Redis client: %s", exc)
        _redis_client = None


def _apply_jitter(expire: int) -> int:
    """Return a TTL with a small random jitter to prevent cache stampedes."""
    return expire + random.randint(0, max(1, expire // 10))


class CacheFacade:
    """Best-effort cache. Every Redis failure is logged and treated as a miss."""

    def __init__(self, ttls: Optional[Mapping[str, int]] = None, client: Any = None):
        self._client = client
        self.ttls = {
            HALL: settings.HALL_CACHE_TTL,
            QUOTATION: settings.QUOTATION_CACHE_TTL,
            BOOKING: settings.BOOKING_CACHE_TTL,
            "list": settings.LIST_CACHE_TTL,
        }
        if ttls:
            self.ttls.update(ttls)

    @property
    def client(self):
        return self._client if self._client is not None else get_redis_client()

    # ─── keys ───────────────────────────────────────────────────────────────
    @staticmethod
    def entity_key(kind: str, entity_id: Any) -> str:
        return f"{kind}:{entity_id}"

    @staticmethod
    def version_key(kind: str) -> str:
        return f"{kind}:list:version"

    def namespace_version(self, kind: str) -> int:
        try:
            raw = self.client.get(self.version_key(kind))
        except redis.exceptions.RedisError as exc:
            logger.warning("Could not read cache namespace for %s: %s", kind, exc)
            return 0
        return int(raw) if raw else 0

    def list_key(self, kind: str, params: Mapping[str, Any]) -> str:
        canonical = dumps(sorted(params.items()))
        digest = hashlib.sha1(canonical.encode("utf-8")).hexdigest()[:16]
        return f"{kind}:list:v{self.namespace_version(kind)}:{digest}"

    # ─── raw get/set ────────────────────────────────────────────────────────
    def _get(self, key: str) -> Any | None:
        try:
            data = self.client.get(key)
        except redis.exceptions.RedisError as exc:
            logger.warning("Redis unavailable: %s", exc)
            return None
        if not data:
            return None
        try:
            return loads(data)
        except orjson.JSONDecodeError as exc:
            logger.warning("Could not decode cache entry %s: %s", key, exc)
            return None

    def _set(self, key: str, payload: Any, ttl: int) -> None:
        try:
            self.client.setex(key, _apply_jitter(ttl), dumps(payload))
        except redis.exceptions.RedisError as exc:
            logger.warning("Could not cache %s: %s", key, exc)

    # ─── entities ───────────────────────────────────────────────────────────
    def get_entity(self, kind: str, entity_id: Any) -> Any | None:
        return self._get(self.entity_key(kind, entity_id))

    def set_entity(self, kind: str, entity_id: Any, payload: Any) -> None:
        self._set(self.entity_key(kind, entity_id), payload, self.ttls.get(kind, 300))

    def read_through(self, kind: str, entity_id: Any, loader: Callable[[], Any]) -> Any | None:
        """Return the cached payload, or call ``loader`` and cache its result."""
        cached = self.get_entity(kind, entity_id)
        if cached is not None:
            return cached
        payload = loader()
        if payload is not None:
            self.set_entity(kind, entity_id, payload)
        return payload

    # ─── listings ───────────────────────────────────────────────────────────
    def get_list(self, key: str) -> Any | None:
        return self._get(key)

    def set_list(self, key: str, payload: Any) -> None:
        self._set(key, payload, self.ttls["list"])

    def list_through(self, kind: str, params: Mapping[str, Any], loader: Callable[[], Any]) -> Any:
        """Return a cached listing page, or call ``loader`` and cache its result.

        The key is resolved before ``loader`` runs, so a page read before a
        concurrent write lands in the namespace that write retires.
        """
        key = self.list_key(kind, params)
        cached = self.get_list(key)
        if cached is not None:
            return cached
        payload = loader()
        self.set_list(key, payload)
        return payload

    # ─── invalidation ───────────────────────────────────────────────────────
    def invalidate(self, kind: str, *entity_ids: Any) -> None:
        """Drop the given entity keys and retire every cached listing of ``kind``."""
        client = self.client
        try:
            if entity_ids:
                client.delete(*(self.entity_key(kind, i) for i in entity_ids))
            client.incr(self.version_key(kind))
        except redis.exceptions.RedisError as exc:
            logger.warning("Could not invalidate %s cache: %s", kind, exc)
