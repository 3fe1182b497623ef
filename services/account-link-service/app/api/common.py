"""Request handling shared by the API routes: caller authentication and the local account gate."""

from __future__ import annotations

import logging

import jwt
from fastapi import Header, HTTPException, Request, status

from ..domain.account import LocalAccount
from ..domain.contracts import AuthenticatedUser, LocalAccountLookup
from ..domain.errors import RemoteAccountNotFoundError
from ..domain.service import LocalAccountProvider
from ..security.tokens import decode_access_token, user_from_claims

logger = logging.getLogger(__name__)

TRY_AGAIN_LATER = "Try again later"


def get_provider(request: Request) -> LocalAccountProvider:
    """Resolve the `LocalAccountProvider` stored on the FastAPI application state."""
    provider: LocalAccountProvider = request.app.state.account_provider
    return provider


def get_authenticated_user(
    authorization: str | None = Header(default=None),
) -> AuthenticatedUser | None:
    """Return the caller identity from an optional bearer token.

    Authentication is optional: a missing, malformed or unverifiable token
    leaves the request unauthenticated.
    """
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        logger.debug("ignoring non-bearer authorization header")
        return None
    try:
        claims = decode_access_token(token.strip())
    except jwt.PyJWTError as exc:
        logger.warning("rejected bearer token: %s", exc)
        return None
    return user_from_claims(claims)


def check_local_account(
    user: AuthenticatedUser | None, provider: LocalAccountProvider
) -> LocalAccount:
    """Return the caller's local account, creating it from the remote account if needed.

    Raises
    ------
    HTTPException
        401 without an authenticated user, 404 when the Account Steward has no
        account for the identity, 500 for any other failure.
    """
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User is unauthorized.")

    lookup = LocalAccountLookup(email=user.email, identity_id=user.user_id)
    try:
        return provider.init_get(lookup)
    except RemoteAccountNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Account not found for Identity ID {user.user_id}",
        ) from exc
    except Exception as exc:
        logger.exception("account retrieval for %r has failed", lookup)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=TRY_AGAIN_LATER
        ) from exc
