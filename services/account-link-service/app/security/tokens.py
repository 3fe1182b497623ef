"""Utilities for issuing and validating the JWTs this service deals with."""

from __future__ import annotations

import time
from typing import Any

import jwt

from ..config import get_settings
from ..domain.contracts import AuthenticatedUser


def issue_access_token(*, subject: str, email: str, ttl_seconds: int = 3600) -> str:
    """Create a signed JWT in the shape the upstream identity provider issues.

    Parameters
    ----------
    subject:
        Identity provider id to embed in the token `sub` claim.
    email:
        Login email of the authenticated user.
    ttl_seconds:
        Lifetime of the token.

    Returns
    -------
    str
        The encoded JWT string.
    """

    settings = get_settings()
    now = int(time.time())
    payload: dict[str, Any] = {
        "iss": settings.jwt_issuer,
        "sub": subject,
        "email": email,
        "iat": now,
        "exp": now + ttl_seconds,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify an inbound JWT returning its payload.

    Parameters
    ----------
    token:
        Encoded JWT presented as a bearer token.

    Returns
    -------
    dict[str, Any]
        The decoded payload if signature and issuer checks succeed.

    Raises
    ------
    jwt.PyJWTError
        Propagated when the token is invalid, expired, or signed by another issuer.
    """

    settings = get_settings()
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=["HS256"],
        audience=None,
        issuer=settings.jwt_issuer,
        options={"require": ["sub", "exp"]},
    )


def user_from_claims(claims: dict[str, Any]) -> AuthenticatedUser | None:
    """Map verified claims to the caller identity; ``None`` when the email claim is missing."""
    email = claims.get("email")
    subject = claims.get("sub")
    if not email or not subject:
        return None
    return AuthenticatedUser(email=email, user_id=str(subject))


def issue_service_token(*, email: str, identity_id: str) -> str:
    """Create the service-account JWT used to call the Account Steward on behalf of a user.

    Parameters
    ----------
    email:
        Login email of the user the call is made for.
    identity_id:
        Identity provider id of the same user.
    """

    settings = get_settings()
    now = int(time.time())
    payload: dict[str, Any] = {
        "iss": settings.steward_service_account,
        "sub": settings.steward_service_account,
        "on_behalf_of": {"email": email, "identity_id": identity_id},
        "iat": now,
        "exp": now + settings.steward_token_ttl_seconds,
    }
    return jwt.encode(payload, settings.steward_signing_secret, algorithm="HS256")
