"""Shared schema exports."""

from .account import AccountBusiness, RemoteAccount

__all__ = [
    "AccountBusiness",
    "RemoteAccount",
]
