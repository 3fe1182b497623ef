"""Tests for the in-memory and Redis-backed local account caches."""

from __future__ import annotations

import fakeredis
import pytest

from app.cache import memory_cache
from app.cache.memory_cache import InMemoryLocalAccountCache
from app.cache.redis_cache import RedisLocalAccountCache
from app.domain.account import LocalAccount


def _account(account_id: int | None = 42) -> LocalAccount:
    return LocalAccount(
        email="a@x.com",
        identity_id="prov-1",
        account_id=account_id,
        locale="fr",
        domicile="SK",
        zone="Europe/Paris",
    )


@pytest.fixture()
def redis_client() -> fakeredis.FakeStrictRedis:
    client = fakeredis.FakeStrictRedis()
    client.flushall()
    return client


def test_memory_cache_returns_stored_account():
    cache = InMemoryLocalAccountCache(ttl_seconds=3600)
    cache.put(_account())

    cached = cache.get(42)

    assert cached == _account()
    assert cached.locale == "fr"
    assert cache.get(43) is None


def test_memory_cache_expires_entries(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(memory_cache.time, "monotonic", lambda: now[0])
    cache = InMemoryLocalAccountCache(ttl_seconds=10)
    cache.put(_account())

    now[0] += 9
    assert cache.get(42) is not None
    now[0] += 2
    assert cache.get(42) is None


def test_memory_cache_evicts_and_ignores_unsaved_accounts():
    cache = InMemoryLocalAccountCache(ttl_seconds=3600)
    cache.put(_account())
    cache.put(_account(account_id=None))

    cache.evict(42)

    assert cache.get(42) is None


def test_redis_cache_round_trips_account(redis_client):
    cache = RedisLocalAccountCache(redis_client, ttl_seconds=3600, key_prefix="test")
    cache.put(_account())

    cached = cache.get(42)

    assert cached == _account()
    assert cached.zone == "Europe/Paris"
    assert 0 < redis_client.ttl("test:42") <= 3600


def test_redis_cache_evict(redis_client):
    cache = RedisLocalAccountCache(redis_client, ttl_seconds=3600, key_prefix="test")
    cache.put(_account())

    cache.evict(42)

    assert cache.get(42) is None
    assert redis_client.exists("test:42") == 0


def test_redis_cache_degrades_to_miss_when_redis_is_down():
    server = fakeredis.FakeServer()
    client = fakeredis.FakeStrictRedis(server=server)
    cache = RedisLocalAccountCache(client, ttl_seconds=3600, key_prefix="test")
    cache.put(_account())
    server.connected = False

    assert cache.get(42) is None
    cache.put(_account())
    cache.evict(42)

    server.connected = True
    assert cache.get(42) == _account()
