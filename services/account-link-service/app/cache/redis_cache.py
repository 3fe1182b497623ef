"""Redis-backed expiring cache of local accounts."""

from __future__ import annotations

import json
import logging

from redis import Redis
from redis.exceptions import RedisError

from ..domain.account import LocalAccount

logger = logging.getLogger(__name__)


class RedisLocalAccountCache:
    """Shared cache storing each account as a JSON document with a TTL.

    Redis failures are logged and treated as cache misses so lookups fall
    through to the database.
    """

    def __init__(self, client: Redis, *, ttl_seconds: int, key_prefix: str = "local-account") -> None:
        """Store the Redis client, expiration window and key namespace."""
        self._client = client
        self._ttl = ttl_seconds
        self._key_prefix = key_prefix

    def _key(self, account_id: int) -> str:
        return f"{self._key_prefix}:{account_id}"

    def get(self, account_id: int) -> LocalAccount | None:
        """Return the cached account or ``None`` once Redis has expired it."""
        try:
            raw = self._client.get(self._key(account_id))
        except RedisError as exc:
            logger.warning("account cache read failed for %s: %s", account_id, exc)
            return None
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return LocalAccount.from_dict(json.loads(raw))

    def put(self, account: LocalAccount) -> None:
        if account.account_id is None:
            return
        try:
            self._client.setex(self._key(account.account_id), self._ttl, json.dumps(account.to_dict()))
        except RedisError as exc:
            logger.warning("account cache write failed for %s: %s", account.account_id, exc)

    def evict(self, account_id: int) -> None:
        try:
            self._client.delete(self._key(account_id))
        except RedisError as exc:
            # a stale entry still expires with its TTL
            logger.warning("account cache eviction failed for %s: %s", account_id, exc)
