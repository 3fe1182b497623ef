"""Exceptions raised by the account linking workflows."""

from __future__ import annotations


class RemoteAccountNotFoundError(LookupError):
    """The Account Steward has no account for the requested login id."""

    def __init__(self, login_id: str) -> None:
        super().__init__(f"remote account not found: {login_id}")
        self.login_id = login_id


class AccountStewardError(RuntimeError):
    """Any Account Steward failure other than a missing account."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
