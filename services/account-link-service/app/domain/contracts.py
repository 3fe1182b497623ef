"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class LocalAccountLookup:
    """Identity of the account to resolve; ``account_id`` is optional but cheaper to look up."""

    email: str
    identity_id: str
    account_id: int | None = None


@dataclass(frozen=True, slots=True)
class AuthenticatedUser:
    """Caller identity decoded from the inbound bearer token."""

    email: str
    user_id: str
