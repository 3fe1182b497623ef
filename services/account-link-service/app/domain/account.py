from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol
from zoneinfo import ZoneInfo

from schemas import RemoteAccount

from .contracts import LocalAccountLookup
from .domicile import AccountDefaults, Domicile, get_account_defaults

logger = logging.getLogger(__name__)

# 21.10.2017 08:00:00 GMT+0200
MODEL_VERSION = 1508565600000


class RemoteAccountSource(Protocol):
    def get_account(self, login_id: str, on_behalf_of: "LocalAccount") -> RemoteAccount:
        ...


@dataclass(slots=True, eq=False)
class LocalAccount:
    """Local lightweight mirror of an account managed by the Account Steward.

    The record owns local entities on behalf of the remote account. It is keyed
    by the remote account id, so ``account_id`` has to be known before the
    record can be persisted.
    """

    email: str
    identity_id: str
    account_id: int | None = None
    locale: str | None = None
    domicile: str | None = None
    zone: str | None = None
    remote: RemoteAccount | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.email is None:
            raise ValueError("account email is mandatory")
        if self.identity_id is None:
            raise ValueError("account identity id is mandatory")

    @classmethod
    def from_lookup(cls, lookup: LocalAccountLookup) -> "LocalAccount":
        """Build a not yet initialised record; call :meth:`init` to populate it."""
        return cls(
            email=lookup.email,
            identity_id=lookup.identity_id,
            account_id=lookup.account_id,
        )

    @classmethod
    def from_remote(
        cls, remote: RemoteAccount, defaults: AccountDefaults | None = None
    ) -> "LocalAccount":
        """Build a fully initialised record from an already fetched remote account."""
        account = cls(email=remote.email, identity_id=remote.identity_id, account_id=remote.id)
        account.apply_remote(remote, defaults)
        return account

    def init(self, source: RemoteAccountSource, defaults: AccountDefaults | None = None) -> None:
        """Populate the local properties from the remote account.

        Raises
        ------
        RemoteAccountNotFoundError
            Propagated when the Account Steward does not know the account.
        """
        self.apply_remote(self.get_account(source), defaults)

    def apply_remote(self, remote: RemoteAccount, defaults: AccountDefaults | None = None) -> None:
        defaults = defaults or get_account_defaults()
        self.account_id = remote.id
        self.email = remote.email
        self.identity_id = remote.identity_id
        self.locale = remote.locale
        if remote.business is not None:
            self.domicile = remote.business.domicile
        self.zone = remote.zone_id or defaults.zone
        self.remote = remote

    def get_account(self, source: RemoteAccountSource) -> RemoteAccount:
        """Return the remote account, fetching it unless already held in memory.

        The account is identified by ``account_id`` when known, otherwise by the
        identity provider id. The request is made on behalf of this record.
        """
        if self.remote is not None:
            return self.remote
        if source is None:
            raise ValueError("remote account source must be provided")

        login_id = self.identity_id if self.account_id is None else str(self.account_id)
        if not login_id:
            raise ValueError("account login id can't be empty")
        remote = source.get_account(login_id, self)
        self.remote = remote
        return remote

    def get_locale(self, preferred: str | None = None, defaults: AccountDefaults | None = None) -> str:
        """Return the preferred language, the stored one, or the service default."""
        if preferred is not None:
            return preferred
        if self.locale:
            return self.locale
        return (defaults or get_account_defaults()).locale

    def set_locale(self, locale: str | None) -> None:
        self.locale = locale

    def get_domicile(
        self, preferred: str | None = None, defaults: AccountDefaults | None = None
    ) -> Domicile:
        """Return the account domicile, falling back to the service default.

        Raises
        ------
        ValueError
            When the resolved code is none of the supported :class:`Domicile` values.
        """
        code = preferred
        if code is None:
            if self.domicile:
                code = self.domicile
            else:
                code = (defaults or get_account_defaults()).domicile.value
                logger.warning("using service default domicile %s for account %s", code, self.account_id)
        return Domicile.parse(code)

    def set_domicile(self, domicile: str | None) -> None:
        self.domicile = domicile

    def get_zone_id(self) -> ZoneInfo:
        """Return the time-zone used to render date-times of the account's resources."""
        if self.zone is None:
            raise ValueError("local account zone is not set")
        return ZoneInfo(self.zone)

    def set_zone_id(self, zone: str) -> None:
        if zone is None:
            raise ValueError("zone id can't be None")
        self.zone = zone

    def set_email(self, email: str) -> None:
        """Change the login email; the identity id stays the same for the same provider."""
        if email is None:
            raise ValueError("login email can't be None")
        self.email = email

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": self.account_id,
            "email": self.email,
            "identity_id": self.identity_id,
            "locale": self.locale,
            "domicile": self.domicile,
            "zone": self.zone,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LocalAccount":
        return cls(
            email=data["email"],
            identity_id=data["identity_id"],
            account_id=data.get("account_id"),
            locale=data.get("locale"),
            domicile=data.get("domicile"),
            zone=data.get("zone"),
        )

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, LocalAccount):
            return NotImplemented
        return self.account_id == other.account_id

    def __hash__(self) -> int:
        return hash(self.account_id)
