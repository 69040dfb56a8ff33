"""Saved accounts and the IDE's active login."""

from idekit.accounts.session import ActiveSession
from idekit.accounts.store import Account, AccountStore, parse_accounts, read_accounts
from idekit.accounts.subscription import SubscriptionClient, SubscriptionInfo, classify_profile

__all__ = [
    "Account",
    "AccountStore",
    "ActiveSession",
    "SubscriptionClient",
    "SubscriptionInfo",
    "classify_profile",
    "parse_accounts",
    "read_accounts",
]
