"""Local account provider resolving callers to their persisted local accounts."""

from __future__ import annotations

import logging
import time
from typing import Protocol

from .account import LocalAccount, RemoteAccountSource
from .contracts import LocalAccountLookup
from .domicile import AccountDefaults
from ..metrics import LOCAL_ACCOUNT_CREATE_LATENCY, LOCAL_ACCOUNT_LOOKUPS, LOCAL_ACCOUNTS_CREATED

logger = logging.getLogger(__name__)


class LocalAccountStore(Protocol):
    def get_by_id(self, account_id: int) -> LocalAccount | None:
        ...

    def find_by_email(self, email: str) -> LocalAccount | None:
        ...

    def save(self, account: LocalAccount) -> None:
        ...


class LocalAccountProvider:
    """Get-or-create access to local accounts backed by the Account Steward."""

    def __init__(
        self,
        repository: LocalAccountStore,
        steward: RemoteAccountSource,
        defaults: AccountDefaults | None = None,
    ) -> None:
        """Store the persistence and remote account dependencies."""
        self._repository = repository
        self._steward = steward
        self._defaults = defaults

    def init_get(self, lookup: LocalAccountLookup) -> LocalAccount:
        """Return the local account for ``lookup``, creating it from the remote account on first use.

        A hit returns the stored record untouched. A miss fetches the remote
        account once and saves exactly one new record.

        Raises
        ------
        ValueError
            When email or identity id is missing.
        RemoteAccountNotFoundError
            When the Account Steward does not know the identity; nothing is saved.
        """
        if lookup is None:
            raise ValueError("lookup can't be None")
        if lookup.email is None:
            raise ValueError("account email can't be None")
        if lookup.identity_id is None:
            raise ValueError("account identity id is mandatory")

        if lookup.account_id is None:
            account = self.get_by_email(lookup.email)
        else:
            # lookup by id is cheaper than the email query
            account = self.get_by_id(lookup.account_id)

        if account is not None:
            LOCAL_ACCOUNT_LOOKUPS.labels("hit").inc()
            return account

        LOCAL_ACCOUNT_LOOKUPS.labels("miss").inc()
        started = time.perf_counter()
        account = LocalAccount.from_lookup(lookup)
        account.init(self._steward, self._defaults)
        self._repository.save(account)
        elapsed = time.perf_counter() - started

        LOCAL_ACCOUNTS_CREATED.inc()
        LOCAL_ACCOUNT_CREATE_LATENCY.observe(elapsed)
        logger.info("local account created in %.3fs: %r", elapsed, account)
        return account

    def get_by_email(self, email: str) -> LocalAccount | None:
        if email is None:
            raise ValueError("account email can't be None")
        return self._repository.find_by_email(email)

    def get_by_id(self, account_id: int) -> LocalAccount | None:
        return self._repository.get_by_id(account_id)
