"""
notion-token: read the Notion desktop app's session token from its cookie store.
"""

from notion_token.core.errors import (
    ConfigurationError,
    KeySourceUnavailable,
    StoreNotFound,
    TokenExtractionError,
)
from notion_token.core.models import ExtractedCredential, PlatformId
from notion_token.extractors.notion import TokenExtractor

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "ExtractedCredential",
    "KeySourceUnavailable",
    "PlatformId",
    "StoreNotFound",
    "TokenExtractionError",
    "TokenExtractor",
]
