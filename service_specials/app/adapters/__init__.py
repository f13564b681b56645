"""
Adapters package for the specials service.

Wraps the Dutchie Plus GraphQL API. The client maps timeouts, HTTP
failures and GraphQL error lists onto shared errors and never retries.
"""

from .dutchie_client import DutchieClient
from .queries import SPECIALS_QUERY, STORES_QUERY

__all__ = [
    "DutchieClient",
    "SPECIALS_QUERY",
    "STORES_QUERY",
]
