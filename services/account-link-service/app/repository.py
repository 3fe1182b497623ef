"""Database repository for local account data."""

from __future__ import annotations

import logging
from typing import Protocol

from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import MODEL_VERSION, LocalAccount

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS local_accounts (
    account_id BIGINT PRIMARY KEY,
    email TEXT NOT NULL,
    identity_id TEXT NOT NULL,
    locale TEXT,
    domicile TEXT,
    zone TEXT,
    model_version BIGINT NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE INDEX IF NOT EXISTS local_accounts_email_idx ON local_accounts (email);
CREATE INDEX IF NOT EXISTS local_accounts_identity_id_idx ON local_accounts (identity_id);
"""

_COLUMNS = "account_id, email, identity_id, locale, domicile, zone"


class LocalAccountCache(Protocol):
    def get(self, account_id: int) -> LocalAccount | None:
        ...

    def put(self, account: LocalAccount) -> None:
        ...

    def evict(self, account_id: int) -> None:
        ...


class LocalAccountRepository:
    """Postgres-backed local account persistence with an optional entity cache."""

    def __init__(self, pool: ConnectionPool, cache: LocalAccountCache | None = None) -> None:
        """Store the connection pool and the cache consulted on lookups by id."""
        self._pool = pool
        self._cache = cache

    def ensure_schema(self) -> None:
        """Create the ``local_accounts`` table and its lookup indexes if missing."""
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
                conn.commit()

    def get_by_id(self, account_id: int) -> LocalAccount | None:
        """Fetch a local account by its (remote) account id or return ``None``."""
        if self._cache is not None:
            cached = self._cache.get(account_id)
            if cached is not None:
                return cached

        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM local_accounts WHERE account_id = %s",
                    (account_id,),
                )
                row = cur.fetchone()
        if not row:
            return None

        account = self._map_record(row)
        if self._cache is not None:
            self._cache.put(account)
        return account

    def find_by_email(self, email: str) -> LocalAccount | None:
        """Return the first local account registered with ``email``."""
        if email is None:
            raise ValueError("account email can't be None")
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM local_accounts
                    WHERE email = %s
                    ORDER BY account_id
                    LIMIT 1
                    """,
                    (email,),
                )
                row = cur.fetchone()
        if not row:
            return None
        return self._map_record(row)

    def save(self, account: LocalAccount) -> None:
        """Upsert the whole record in a transaction of its own.

        Raises
        ------
        ValueError
            When the account id has not been taken over from the remote account yet.
        """
        if account.account_id is None:
            raise ValueError("the account id is expected to be set in advance from the remote account")

        with self._pool.connection() as conn:
            with conn.transaction():
                conn.execute(
                    """
                    INSERT INTO local_accounts
                        (account_id, email, identity_id, locale, domicile, zone, model_version, updated_at)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, NOW())
                    ON CONFLICT (account_id) DO UPDATE SET
                        email = EXCLUDED.email,
                        identity_id = EXCLUDED.identity_id,
                        locale = EXCLUDED.locale,
                        domicile = EXCLUDED.domicile,
                        zone = EXCLUDED.zone,
                        model_version = EXCLUDED.model_version,
                        updated_at = EXCLUDED.updated_at
                    """,
                    (
                        account.account_id,
                        account.email,
                        account.identity_id,
                        account.locale,
                        account.domicile,
                        account.zone,
                        MODEL_VERSION,
                    ),
                )

        if self._cache is not None:
            self._cache.put(account)

    def delete(self, account: LocalAccount) -> None:
        """Remove the record in a transaction of its own."""
        if account.account_id is None:
            raise ValueError("can't delete a local account without an account id")

        with self._pool.connection() as conn:
            with conn.transaction():
                conn.execute("DELETE FROM local_accounts WHERE account_id = %s", (account.account_id,))

        if self._cache is not None:
            self._cache.evict(account.account_id)
        logger.info("local account %s deleted", account.account_id)

    def _map_record(self, row: tuple) -> LocalAccount:
        """Convert a raw database tuple into the domain ``LocalAccount``."""
        return LocalAccount(
            account_id=row[0],
            email=row[1],
            identity_id=row[2],
            locale=row[3],
            domicile=row[4],
            zone=row[5],
        )
