"""HTTP client for the Account Steward service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from schemas import RemoteAccount

from .config import Settings
from .domain.errors import AccountStewardError, RemoteAccountNotFoundError
from .metrics import STEWARD_ERRORS
from .security.tokens import issue_service_token

if TYPE_CHECKING:
    from .domain.account import LocalAccount

logger = logging.getLogger(__name__)


class AccountStewardClient:
    """Fetches remote accounts, authenticating as the service on behalf of a local account."""

    def __init__(self, http: httpx.Client) -> None:
        """Store the HTTP client; its base URL must point at the steward API root."""
        self._http = http

    @classmethod
    def from_settings(cls, settings: Settings) -> "AccountStewardClient":
        http = httpx.Client(
            base_url=settings.steward_base_url,
            timeout=settings.steward_timeout_seconds,
            headers={"Accept": "application/json"},
        )
        return cls(http)

    def close(self) -> None:
        self._http.close()

    def get_account(self, login_id: str, on_behalf_of: LocalAccount) -> RemoteAccount:
        """Return the remote account identified by an account id or an identity provider id.

        Raises
        ------
        RemoteAccountNotFoundError
            When the steward answers 404.
        AccountStewardError
            On transport errors, any other non-success status or an unreadable body.
        """
        token = issue_service_token(email=on_behalf_of.email, identity_id=on_behalf_of.identity_id)
        try:
            response = self._http.get(
                f"accounts/{quote(login_id, safe='')}",
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            STEWARD_ERRORS.labels("transport").inc()
            raise AccountStewardError(f"account steward unreachable: {exc}") from exc

        if response.status_code == httpx.codes.NOT_FOUND:
            raise RemoteAccountNotFoundError(login_id)
        if response.is_error:
            STEWARD_ERRORS.labels("status").inc()
            raise AccountStewardError(
                f"account steward responded {response.status_code} for {login_id}",
                status_code=response.status_code,
            )

        try:
            return RemoteAccount.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            STEWARD_ERRORS.labels("payload").inc()
            raise AccountStewardError(f"unexpected account payload for {login_id}") from exc
