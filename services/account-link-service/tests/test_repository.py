from __future__ import annotations

import os

import fakeredis
import pytest

from app.cache.memory_cache import InMemoryLocalAccountCache
from app.cache.redis_cache import RedisLocalAccountCache
from app.domain.account import MODEL_VERSION, LocalAccount
from app.repository import LocalAccountRepository

from fakes import RecordingPool

ROW = (42, "a@x.com", "prov-1", "fr", "SK", "Europe/Paris")


class ExplodingPool:
    """Connection pool that fails the test if the database would be touched."""

    def connection(self):
        raise AssertionError("database must not be used")


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
def offline_redis_cache() -> RedisLocalAccountCache:
    server = fakeredis.FakeServer()
    server.connected = False
    return RedisLocalAccountCache(fakeredis.FakeStrictRedis(server=server), ttl_seconds=3600)


def test_save_requires_account_id():
    repository = LocalAccountRepository(ExplodingPool())  # type: ignore[arg-type]

    with pytest.raises(ValueError):
        repository.save(LocalAccount(email="a@x.com", identity_id="prov-1"))


def test_delete_requires_account_id():
    repository = LocalAccountRepository(ExplodingPool())  # type: ignore[arg-type]

    with pytest.raises(ValueError):
        repository.delete(LocalAccount(email="a@x.com", identity_id="prov-1"))


def test_get_by_id_is_served_from_cache():
    cache = InMemoryLocalAccountCache(ttl_seconds=3600)
    cache.put(LocalAccount(email="a@x.com", identity_id="prov-1", account_id=42))
    repository = LocalAccountRepository(ExplodingPool(), cache)  # type: ignore[arg-type]

    account = repository.get_by_id(42)

    assert account is not None
    assert account.email == "a@x.com"


def test_get_by_id_caches_database_row():
    pool = RecordingPool(rows=[ROW])
    cache = InMemoryLocalAccountCache(ttl_seconds=3600)
    repository = LocalAccountRepository(pool, cache)  # type: ignore[arg-type]

    first = repository.get_by_id(42)
    second = repository.get_by_id(42)

    assert first == second == _account()
    assert first.domicile == "SK"
    assert len(pool.statements) == 1
    query, params = pool.statements[0]
    assert "WHERE account_id = %s" in query
    assert params == (42,)
    assert cache.get(42) is not None


def test_get_by_id_miss_leaves_cache_empty():
    pool = RecordingPool()
    cache = InMemoryLocalAccountCache(ttl_seconds=3600)
    repository = LocalAccountRepository(pool, cache)  # type: ignore[arg-type]

    assert repository.get_by_id(42) is None
    assert cache.get(42) is None


def test_find_by_email_takes_lowest_account_id():
    pool = RecordingPool(rows=[ROW])
    repository = LocalAccountRepository(pool)  # type: ignore[arg-type]

    account = repository.find_by_email("a@x.com")

    assert account == _account()
    query, params = pool.statements[0]
    assert "WHERE email = %s ORDER BY account_id LIMIT 1" in query
    assert params == ("a@x.com",)


def test_save_upserts_in_own_transaction_and_caches():
    pool = RecordingPool()
    cache = InMemoryLocalAccountCache(ttl_seconds=3600)
    repository = LocalAccountRepository(pool, cache)  # type: ignore[arg-type]

    repository.save(_account())

    assert pool.transactions == 1
    query, params = pool.statements[0]
    assert query.startswith("INSERT INTO local_accounts")
    assert "ON CONFLICT (account_id) DO UPDATE" in query
    assert params == (42, "a@x.com", "prov-1", "fr", "SK", "Europe/Paris", MODEL_VERSION)
    assert cache.get(42) == _account()


def test_delete_runs_in_own_transaction_and_evicts():
    pool = RecordingPool()
    cache = InMemoryLocalAccountCache(ttl_seconds=3600)
    cache.put(_account())
    repository = LocalAccountRepository(pool, cache)  # type: ignore[arg-type]

    repository.delete(_account())

    assert pool.transactions == 1
    assert pool.statements == [("DELETE FROM local_accounts WHERE account_id = %s", (42,))]
    assert cache.get(42) is None


def test_unreachable_redis_falls_through_to_database(offline_redis_cache):
    pool = RecordingPool(rows=[ROW])
    repository = LocalAccountRepository(pool, offline_redis_cache)  # type: ignore[arg-type]

    account = repository.get_by_id(42)

    assert account == _account()
    assert len(pool.statements) == 1


def test_unreachable_redis_does_not_fail_committed_writes(offline_redis_cache):
    pool = RecordingPool()
    repository = LocalAccountRepository(pool, offline_redis_cache)  # type: ignore[arg-type]

    repository.save(_account())
    repository.delete(_account())

    assert pool.transactions == 2


@pytest.mark.skipif(not os.getenv("TEST_POSTGRES_URL"), reason="TEST_POSTGRES_URL not set")
def test_postgres_upsert_converges_on_one_row():
    from psycopg_pool import ConnectionPool

    with ConnectionPool(os.environ["TEST_POSTGRES_URL"]) as pool:
        repository = LocalAccountRepository(pool)
        repository.ensure_schema()
        with pool.connection() as conn:
            conn.execute("DELETE FROM local_accounts WHERE email = %s", ("race@x.com",))

        repository.save(LocalAccount(email="race@x.com", identity_id="prov-9", account_id=9002))
        repository.save(LocalAccount(email="race@x.com", identity_id="prov-9", account_id=9002, locale="fr"))
        repository.save(LocalAccount(email="race@x.com", identity_id="prov-8", account_id=9001))

        with pool.connection() as conn:
            count = conn.execute(
                "SELECT COUNT(*) FROM local_accounts WHERE account_id = %s", (9002,)
            ).fetchone()[0]
        assert count == 1
        assert repository.get_by_id(9002).locale == "fr"
        assert repository.find_by_email("race@x.com").account_id == 9001

        repository.delete(LocalAccount(email="race@x.com", identity_id="prov-9", account_id=9002))
        repository.delete(LocalAccount(email="race@x.com", identity_id="prov-8", account_id=9001))
        assert repository.get_by_id(9002) is None
