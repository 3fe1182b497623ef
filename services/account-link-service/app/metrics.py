"""Prometheus metrics for the account linking workflows."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

LOCAL_ACCOUNT_LOOKUPS = Counter(
    "local_account_lookups_total",
    "Local account resolutions by outcome",
    ["result"],
)
LOCAL_ACCOUNTS_CREATED = Counter(
    "local_accounts_created_total",
    "Local accounts created from a remote account",
)
LOCAL_ACCOUNT_CREATE_LATENCY = Histogram(
    "local_account_create_seconds",
    "Latency of remote fetch plus save on a local account miss",
)
STEWARD_ERRORS = Counter(
    "account_steward_errors_total",
    "Failed Account Steward calls",
    ["kind"],
)
