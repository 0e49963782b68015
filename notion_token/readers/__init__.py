"""
Readers for the desktop app's on-disk stores.
"""

from .cookie_store import CookieStoreReader, find_store, query_cookies

__all__ = [
    "CookieStoreReader",
    "find_store",
    "query_cookies",
]
