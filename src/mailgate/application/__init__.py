"""Application layer - gateway operations and their pure helpers."""

from mailgate.application.gateway import AccountGateway, AccountParams
from mailgate.application.providers import ProviderResolver, ProviderRule, ProviderTable, merge_target

__all__ = [
    "AccountGateway",
    "AccountParams",
    "ProviderResolver",
    "ProviderRule",
    "ProviderTable",
    "merge_target",
]
