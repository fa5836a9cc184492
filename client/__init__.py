"""
Python client for the storefront API with persisted session and cart.
"""

from client.api import StorefrontAPIError, StorefrontClient
from client.state import AuthState, CartState, LocalStorage, SearchState

__all__ = [
    "AuthState",
    "CartState",
    "LocalStorage",
    "SearchState",
    "StorefrontAPIError",
    "StorefrontClient",
]
