"""HTTP route definitions for the account link service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from ..config import get_settings
from ..domain.contracts import AuthenticatedUser
from .common import check_local_account, get_authenticated_user, get_provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")


class Message(BaseModel):
    """Greeting payload echoed back by the message endpoint."""

    greetings: str | None = None


@router.put("/message/{message_id}", response_model=Message)
def update_message(
    message_id: int,
    message: Message,
    request: Request,
    user: AuthenticatedUser | None = Depends(get_authenticated_user),
) -> Message:
    """Prefix the greeting with the path id."""
    if get_settings().require_local_account:
        account = check_local_account(user, get_provider(request))
        logger.debug("message %s updated by account %s", message_id, account.account_id)

    greetings = "" if message.greetings is None else f" {message.greetings}"
    return Message(greetings=f"{message_id}{greetings}")
